"""Resource class generation.

Example:
    >>> factory = ResourceFactory(HttpxTransport(base_url="https://api.example.com"))
    >>> Volume = factory("volume", "/api/volume/:id", {"id": "@id"}, {
    ...     "update": {"method": "PUT"},
    ...     "search": {"method": "GET", "isArray": True, "url": "/api/volume/search"},
    ... })
    >>> volume = Volume.get({"id": 7})     # pending Resource
    >>> await volume                       # settled, fields filled in
    >>> volume["name"] = "Renamed"
    >>> await volume.update()              # PUT /api/volume/7 with the instance as body
    >>> Volume.cache                       # the "volume" cache adapter
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from restcase.cache import CacheStore
from restcase.routing import Route
from restcase.transport import Transport

from .action import DEFAULT_ACTIONS, Action
from .instance import ActionMethod, Resource
from .pipeline import RequestPipeline

logger = logging.getLogger("restcase.factory")

_RESERVED = frozenset(name for name in dir(Resource) if not name.startswith("_")) | {
    "resolved", "promise", "cache", "route", "url_template", "param_defaults", "actions", "cache_namespace",
}


def _class_name(namespace: str) -> str:
    words = "".join(c if c.isalnum() else " " for c in namespace).split()
    return "".join(w[:1].upper() + w[1:] for w in words) or "Generated"


class ResourceFactory:
    """Builds resource classes bound to one transport and one cache store.

    Args:
        transport: Sends requests on cache misses
        caches: Namespace -> cache adapter store (a fresh :class:`CacheStore` by default)
    """

    __slots__ = ("transport", "caches")

    def __init__(self, transport: Transport, caches: CacheStore | None = None) -> None:
        self.transport = transport
        self.caches = caches if caches is not None else CacheStore()

    def __call__(
        self,
        cache_namespace: str,
        url: str,
        param_defaults: Mapping[str, Any] | None = None,
        actions: Mapping[str, Action | Mapping[str, Any]] | None = None,
    ) -> type[Resource]:
        """Generate a resource class.

        ``actions`` override the defaults (get, save, query, remove, delete) by name.

        Raises:
            BadParamName: the url template uses a forbidden token name
            ValueError: an action name would shadow the Resource API
        """
        merged = {**DEFAULT_ACTIONS, **{name: Action.coerce(spec) for name, spec in (actions or {}).items()}}
        clashes = sorted(name for name in merged if name in _RESERVED or name.startswith("_"))
        if clashes:
            raise ValueError(f"Action names shadow the Resource API: {', '.join(clashes)}")

        defaults = dict(param_defaults or {})
        route = Route(url)
        for action in merged.values():
            if action.url:
                Route(action.url)
        cache = self.caches.namespace(cache_namespace)

        attrs: dict[str, Any] = {
            "cache_namespace": cache_namespace,
            "cache": cache,
            "url_template": url,
            "route": route,
            "param_defaults": MappingProxyType(defaults),
            "actions": MappingProxyType(merged),
            "_factory": self,
        }
        attrs.update((name, ActionMethod(name)) for name in merged)

        cls: type[Resource] = type(f"{_class_name(cache_namespace)}Resource", (Resource,), attrs)
        cls._pipeline = RequestPipeline(cache_namespace, route, self.transport, cache, defaults, cls)
        logger.debug(f"[{cache_namespace}] resource for {url} with actions {', '.join(merged)}")
        return cls
