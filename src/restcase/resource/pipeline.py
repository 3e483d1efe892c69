"""Cache-then-network request pipeline.

For every action call:

1. Resolve parameters from the payload (``@`` paths, producers, literals) and
   merge the caller's params over them.
2. Ask the cache adapter for ``(ids["id"], caller params)``.
   - Hit: copy the snapshot into the target and settle it synchronously.
   - Miss: send the request through the transport.
3. Validate the response shape against ``is_array``, merge it into the target
   in place and store the snapshot(s) in the cache.
4. Run the response interceptor, then ``on_success``; on failure run
   ``on_error``, then the response-error interceptor.

The target is settled whatever the outcome, and exactly one of ``on_success`` /
``on_error`` fires. Nothing is retried and identical concurrent calls are not
coalesced: both go to the network and the last one to settle wins.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, NoReturn

from restcase.cache import CacheAdapter
from restcase.errors import BadResponseShape, ResourceException, TransportError
from restcase.params import extract_params
from restcase.routing import Route
from restcase.signature import ActionCall
from restcase.transport import RequestConfig, Transport, TransportResponse

from .action import Action
from .instance import Resource, ResourceCollection

logger = logging.getLogger("restcase.pipeline")

Target = Resource | ResourceCollection


@dataclass(slots=True)
class Response:
    """Outcome handed to the response interceptor."""

    resource: Any
    config: RequestConfig
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    data: Any = None
    from_cache: bool = False


async def _maybe_await(value: Any) -> Any:
    return await value if inspect.isawaitable(value) else value


def _shape(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    return "object" if isinstance(value, Mapping) else type(value).__name__


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # on_error already saw the failure; awaiting callers still get it
    if not task.cancelled():
        task.exception()


class RequestPipeline:
    """Runs action calls for one generated resource class.

    Args:
        namespace: Cache namespace, used in log messages
        route: Compiled url template
        transport: Sends requests on cache misses
        cache: Snapshot cache consulted before the network
        param_defaults: Factory-level parameter spec
        make_item: Builds one resource per element of an array response
    """

    __slots__ = ("namespace", "route", "transport", "cache", "param_defaults", "make_item")

    def __init__(
        self,
        namespace: str,
        route: Route,
        transport: Transport,
        cache: CacheAdapter,
        param_defaults: Mapping[str, Any],
        make_item: Callable[[Any], Resource],
    ) -> None:
        self.namespace = namespace
        self.route = route
        self.transport = transport
        self.cache = cache
        self.param_defaults = param_defaults
        self.make_item = make_item

    def build_request(self, action: Action, call: ActionCall, payload: Any) -> tuple[dict[str, Any], RequestConfig]:
        """Resolve parameters and url. Raises configuration errors synchronously."""
        ids = {**extract_params(payload, action.params, self.param_defaults), **call.params}
        url, query = self.route.resolve(ids, action.url)
        config = RequestConfig(
            method=action.method,
            url=url,
            params=query,
            data=payload if action.has_body else None,
            headers=action.headers,
            timeout=action.timeout,
        )
        return ids, config

    def dispatch(self, name: str, action: Action, call: ActionCall, target: Target) -> asyncio.Task[Any]:
        """Start one action call and return the task that settles it.

        Must be called from a running event loop.
        """
        tag = f"[{self.namespace}.{name}]"
        payload = call.data.to_dict() if isinstance(call.data, Resource) else call.data
        ids, config = self.build_request(action, call, payload)
        loop = asyncio.get_running_loop()

        cached = self.cache.get(ids.get("id"), call.params)
        outcome: Awaitable[Response]
        if cached is not None:
            logger.debug(f"{tag} cache hit id={ids.get('id')!r}")
            try:
                self._merge(action, target, cached)
            except BadResponseShape as e:
                target.settle()
                outcome = self._fail(tag, call, config, e)
            else:
                target.settle()
                outcome = self._from_cache(target, config)
        else:
            logger.debug(f"{tag} cache miss, {config.method} {config.url}")
            outcome = self._from_network(tag, action, call, config, target)

        task = loop.create_task(self._intercept(action, call, outcome))
        if call.on_error is not None:
            task.add_done_callback(_consume_exception)
        return task

    async def _from_cache(self, target: Target, config: RequestConfig) -> Response:
        return Response(resource=target, config=config, from_cache=True)

    async def _from_network(
        self,
        tag: str,
        action: Action,
        call: ActionCall,
        config: RequestConfig,
        target: Target,
    ) -> Response:
        try:
            reply = await self.transport.send(config)
            if reply.data is not None and reply.data != "":
                self._merge(action, target, reply.data)
                self._store(reply.data, call.params)
        except ResourceException as e:
            target.settle()
            await self._fail(tag, call, config, e)
        except Exception as e:
            target.settle()
            await self._fail(tag, call, config, TransportError.from_exception(e, config.url), e)

        target.settle()
        return self._response(target, config, reply)

    async def _fail(
        self,
        tag: str,
        call: ActionCall,
        config: RequestConfig,
        error: ResourceException,
        cause: Exception | None = None,
    ) -> NoReturn:
        """Report ``error`` to ``on_error`` and reject the call with it."""
        logger.warning(f"{tag} {config.method} {config.url} failed: {error}")
        if call.on_error is not None:
            await _maybe_await(call.on_error(error))
        if cause is not None:
            raise error from cause
        raise error

    @staticmethod
    def _response(target: Target, config: RequestConfig, reply: TransportResponse) -> Response:
        return Response(
            resource=target,
            config=config,
            status=reply.status,
            headers=reply.headers,
            data=reply.data,
        )

    def _merge(self, action: Action, target: Target, data: Any) -> None:
        """Copy ``data`` into ``target`` in place.

        Raises:
            BadResponseShape: array-ness of ``data`` disagrees with ``action.is_array``
        """
        if action.is_array:
            if not isinstance(data, list):
                raise BadResponseShape("array", _shape(data))
        elif not isinstance(data, Mapping):
            raise BadResponseShape("object", _shape(data))

        if isinstance(target, ResourceCollection):
            target.replace(self._item(element) for element in data)
        else:
            target.replace(data)

    def _item(self, element: Any) -> Any:
        if not isinstance(element, Mapping):
            return element
        item = self.make_item(element)
        item.settle()
        return item

    def _store(self, data: Any, params: Mapping[str, Any]) -> None:
        for snapshot in data if isinstance(data, list) else [data]:
            self.cache.set(snapshot, params)

    async def _intercept(self, action: Action, call: ActionCall, outcome: Awaitable[Response]) -> Any:
        interceptor = action.interceptor
        try:
            response = await outcome
        except ResourceException as e:
            if interceptor.response_error is None:
                raise
            return await _maybe_await(interceptor.response_error(e))

        if interceptor.response is not None:
            value = await _maybe_await(interceptor.response(response))
        else:
            value = response.resource
        if call.on_success is not None:
            await _maybe_await(call.on_success(value, response.headers))
        return value
