"""Resource instances: identity-stable cells around a replaceable field snapshot."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator, Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from restcase.signature import ActionCall, ErrorCallback, SuccessCallback

if TYPE_CHECKING:
    from restcase.cache import CacheAdapter
    from restcase.routing import Route

    from .action import Action
    from .factory import ResourceFactory
    from .pipeline import RequestPipeline

Listener = Callable[[Any], None]


class _Observable:
    """Settle flag, request task and change listeners shared by instances and collections."""

    resolved: bool
    promise: asyncio.Future[Any] | None

    def _init_observable(self) -> None:
        self.resolved = False
        self.promise = None
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(self)`` after every change; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def settle(self) -> None:
        self.resolved = True

    def __await__(self) -> Generator[Any, None, Any]:
        if self.promise is None:
            raise RuntimeError(f"{type(self).__name__} has no request in flight")
        return self.promise.__await__()


class Resource(_Observable):
    """One remote entity.

    Fields are read with ``resource["name"]`` or ``resource.name`` and written
    with item assignment. The object identity never changes: responses and
    cache hits replace the snapshot in place.

    Generated subclasses carry one :class:`ActionMethod` per action, usable both
    as a class-level entry point and as an instance shorthand::

        volume = Volume.get({"id": 7})      # new instance, pending
        await volume                        # settled
        volume["name"] = "Renamed"
        await volume.save()                 # POSTs the instance, updates it in place
    """

    cache_namespace: ClassVar[str] = ""
    cache: ClassVar[CacheAdapter]
    url_template: ClassVar[str] = ""
    route: ClassVar[Route]
    param_defaults: ClassVar[Mapping[str, Any]] = {}
    actions: ClassVar[Mapping[str, Action]] = {}
    _factory: ClassVar[ResourceFactory]
    _pipeline: ClassVar[RequestPipeline]

    def __init__(self, value: Mapping[str, Any] | Resource | None = None) -> None:
        self._fields: dict[str, Any] = {}
        self._init_observable()
        if value:
            self._copy_from(value)

    def _copy_from(self, source: Mapping[str, Any] | Resource) -> None:
        items = source._fields if isinstance(source, Resource) else source
        self._fields.clear()
        for key, value in items.items():
            if not (isinstance(key, str) and key.startswith("$$")):
                self._fields[key] = value

    def replace(self, snapshot: Mapping[str, Any] | Resource) -> None:
        """Shallow-clear-and-copy ``snapshot`` into this instance, keeping its identity."""
        self._copy_from(snapshot)
        self._notify()

    def to_dict(self) -> dict[str, Any]:
        return dict(self._fields)

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._fields[key] = value
        self._notify()

    def __delitem__(self, key: str) -> None:
        del self._fields[key]
        self._notify()

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def keys(self) -> Iterable[str]:
        return self._fields.keys()

    def items(self) -> Iterable[tuple[str, Any]]:
        return self._fields.items()

    def field(self, key: str, default: Any = None) -> Any:
        return self._fields.get(key, default)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.__dict__["_fields"][name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} has no field {name!r}") from None

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Resource):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        state = "resolved" if self.resolved else "pending"
        return f"<{type(self).__name__} {self._fields!r} {state}>"

    @classmethod
    def bind(cls, defaults: Mapping[str, Any] | None = None, **extra: Any) -> type[Resource]:
        """Derive a resource class with merged parameter defaults, same actions and cache."""
        merged = {**cls.param_defaults, **(defaults or {}), **extra}
        return cls._factory(cls.cache_namespace, cls.url_template, merged, cls.actions)


class ResourceCollection(_Observable, list):
    """List result of an ``is_array`` action. Its identity survives every refresh."""

    def __init__(self, items: Iterable[Any] = ()) -> None:
        list.__init__(self, items)
        self._init_observable()

    def replace(self, items: Iterable[Any]) -> None:
        self[:] = list(items)
        self._notify()

    def __repr__(self) -> str:
        state = "resolved" if self.resolved else "pending"
        return f"<{type(self).__name__} {list.__repr__(self)} {state}>"


def _initial(data: Any) -> Mapping[str, Any] | Resource | None:
    return data if isinstance(data, (Mapping, Resource)) else None


def static_call(
    cls: type[Resource],
    name: str,
    *args: Any,
    params: Mapping[str, Any] | None = None,
    data: Any = None,
    on_success: SuccessCallback | None = None,
    on_error: ErrorCallback | None = None,
) -> Resource | ResourceCollection:
    """Class-level action entry point. Returns the pending instance or collection."""
    action = cls.actions[name]
    call = ActionCall.resolve(args, has_body=action.has_body).merge(
        params=params, data=data, on_success=on_success, on_error=on_error,
    )
    target: Resource | ResourceCollection = ResourceCollection() if action.is_array else cls(_initial(call.data))
    target.promise = cls._pipeline.dispatch(name, action, call, target)
    return target


def instance_call(
    instance: Resource,
    name: str,
    params: Mapping[str, Any] | SuccessCallback | None = None,
    on_success: SuccessCallback | ErrorCallback | None = None,
    on_error: ErrorCallback | None = None,
) -> asyncio.Future[Any]:
    """Instance shorthand: the instance is the payload and is updated in place."""
    if callable(params):
        on_error, on_success, params = on_success, params, None
    cls = type(instance)
    action = cls.actions[name]
    call = ActionCall.with_data(instance, params, on_success, on_error)
    target: Resource | ResourceCollection = ResourceCollection() if action.is_array else instance
    task = cls._pipeline.dispatch(name, action, call, target)
    target.promise = task
    return task


class ActionMethod:
    """Descriptor exposing an action on the class and as an instance shorthand."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Resource | None, owner: type[Resource]) -> Callable[..., Any]:
        name = self.name
        if instance is None:
            def action(*args: Any, **kwargs: Any) -> Resource | ResourceCollection:
                return static_call(owner, name, *args, **kwargs)
        else:
            def action(*args: Any, **kwargs: Any) -> asyncio.Future[Any]:
                return instance_call(instance, name, *args, **kwargs)
        action.__name__ = action.__qualname__ = name
        return action
