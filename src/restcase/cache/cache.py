"""Entity snapshot caches.

The request pipeline only depends on the :class:`CacheAdapter` protocol:
``get(id, params)`` before touching the network and ``set(snapshot, params)``
after each server-confirmed snapshot. Storage, expiry and eviction belong to
the adapter.
"""

from __future__ import annotations

import hashlib
import heapq
import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import orjson

from restcase.config import CacheSettings, get_settings

logger = logging.getLogger("restcase.cache")

DEFAULT_TTL: float = 300.0  # 5 minutes


@runtime_checkable
class CacheAdapter(Protocol):
    """Keyed lookup/store of entity snapshots."""

    def get(self, id: Any, params: Mapping[str, Any] | None) -> Any | None: ...
    def set(self, snapshot: Any, params: Mapping[str, Any] | None) -> None: ...


@dataclass(slots=True)
class CacheEntry:
    """A cached snapshot with expiration tracking."""
    value: Any
    expires_at: float

    @property
    def expired(self) -> bool:
        return time.time() > self.expires_at


def _copy(snapshot: Any) -> Any:
    if isinstance(snapshot, Mapping):
        return dict(snapshot)
    if isinstance(snapshot, list):
        return [_copy(item) for item in snapshot]
    return snapshot


class MemoryResourceCache:
    """Thread-safe in-memory snapshot cache with TTL-based expiration.

    Snapshots are grouped per entity id, then keyed by a hash of the request
    parameters, so one id can be dropped whatever params it was read with.
    Snapshots are shallow-copied on the way in and out, so merging a cached
    snapshot into a live resource never aliases the cache.

    Args:
        default_ttl: Default TTL in seconds for entries
        max_entries: Maximum number of snapshots before eviction
        id_field: Snapshot field holding the entity id

    Example:
        >>> cache = MemoryResourceCache(default_ttl=60)
        >>> cache.set({"id": 7, "name": "X"}, {"id": 7})
        >>> cache.get(7, {"id": 7})
        {'id': 7, 'name': 'X'}
        >>> cache.invalidate_id(7)
        1
    """

    __slots__ = ("_entities", "_default_ttl", "_max_entries", "_id_field", "_lock")

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        max_entries: int = 1000,
        id_field: str = "id",
    ) -> None:
        self._entities: dict[str, dict[str, CacheEntry]] = {}
        self._default_ttl = default_ttl
        self._max_entries = max_entries
        self._id_field = id_field
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: CacheSettings | None = None) -> MemoryResourceCache:
        settings = settings or get_settings().cache
        return cls(default_ttl=settings.ttl, max_entries=settings.max_entries, id_field=settings.id_field)

    @staticmethod
    def make_key(id: Any, params: Mapping[str, Any] | None) -> tuple[str, str]:
        """``(entity key, params hash)``. ``7`` and ``"7"`` are different entities."""
        params_json = orjson.dumps(dict(params or {}), option=orjson.OPT_SORT_KEYS, default=str)
        return repr(id), hashlib.md5(params_json, usedforsecurity=False).hexdigest()[:12]

    def get(self, id: Any, params: Mapping[str, Any] | None) -> Any | None:
        if id is None:
            return None
        entity, variant = self.make_key(id, params)
        with self._lock:
            entry = self._entities.get(entity, {}).get(variant)
            if entry is None:
                return None
            if entry.expired:
                self._drop_unlocked(entity, variant)
                return None
            return _copy(entry.value)

    def set(self, snapshot: Any, params: Mapping[str, Any] | None, ttl: float | None = None) -> None:
        id = snapshot.get(self._id_field) if isinstance(snapshot, Mapping) else None
        if id is None:
            logger.debug(f"Snapshot without '{self._id_field}' not cached")
            return
        entity, variant = self.make_key(id, params)
        entry = CacheEntry(value=_copy(snapshot), expires_at=time.time() + (ttl or self._default_ttl))
        with self._lock:
            if self._count_unlocked() >= self._max_entries:
                self._prune_unlocked()
            self._entities.setdefault(entity, {})[variant] = entry

    def invalidate(self, id: Any, params: Mapping[str, Any] | None) -> bool:
        """Drop the snapshot read for ``id`` with ``params``."""
        with self._lock:
            return self._drop_unlocked(*self.make_key(id, params))

    def invalidate_id(self, id: Any) -> int:
        """Drop every snapshot of one entity. Returns how many were removed."""
        with self._lock:
            return len(self._entities.pop(repr(id), {}))

    def clear(self) -> None:
        with self._lock:
            self._entities.clear()

    def _drop_unlocked(self, entity: str, variant: str) -> bool:
        variants = self._entities.get(entity)
        if variants is None or variants.pop(variant, None) is None:
            return False
        if not variants:
            del self._entities[entity]
        return True

    def _count_unlocked(self) -> int:
        return sum(len(variants) for variants in self._entities.values())

    def _prune_unlocked(self) -> None:
        """Drop expired snapshots, then the quarter closest to expiry if still full."""
        now = time.time()
        entries = [
            (entry.expires_at, entity, variant)
            for entity, variants in self._entities.items()
            for variant, entry in variants.items()
        ]
        doomed = [(entity, variant) for expires_at, entity, variant in entries if expires_at < now]
        if len(entries) - len(doomed) >= self._max_entries:
            live = [item for item in entries if item[0] >= now]
            doomed += [(entity, variant) for _, entity, variant in heapq.nsmallest(max(1, self._max_entries // 4), live)]
        for entity, variant in doomed:
            self._drop_unlocked(entity, variant)

    @property
    def size(self) -> int:
        with self._lock:
            return self._count_unlocked()

    def stats(self) -> dict[str, object]:
        with self._lock:
            return {
                "entities": len(self._entities),
                "snapshots": self._count_unlocked(),
                "ttl": self._default_ttl,
                "max_entries": self._max_entries,
            }


class NullCache:
    """Adapter that never hits. Used when caching is disabled."""

    __slots__ = ()

    def get(self, id: Any, params: Mapping[str, Any] | None) -> None:
        return None

    def set(self, snapshot: Any, params: Mapping[str, Any] | None) -> None:
        return None


class CacheStore:
    """Namespace -> adapter map handed to a resource factory.

    Example:
        >>> store = CacheStore()
        >>> store.namespace("volume") is store.namespace("volume")
        True
    """

    __slots__ = ("_namespaces", "_make", "_lock")

    def __init__(self, make: Callable[[str], CacheAdapter] | None = None) -> None:
        self._namespaces: dict[str, CacheAdapter] = {}
        self._make = make or _default_adapter
        self._lock = threading.Lock()

    def namespace(self, name: str) -> CacheAdapter:
        with self._lock:
            adapter = self._namespaces.get(name)
            if adapter is None:
                adapter = self._namespaces[name] = self._make(name)
            return adapter

    __getitem__ = namespace

    def __contains__(self, name: str) -> bool:
        return name in self._namespaces

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._namespaces)

    def clear(self) -> None:
        """Clear every namespace whose adapter supports it."""
        with self._lock:
            for adapter in self._namespaces.values():
                clear = getattr(adapter, "clear", None)
                if clear is not None:
                    clear()


def _default_adapter(name: str) -> CacheAdapter:
    settings = get_settings().cache
    if not settings.enabled:
        return NullCache()
    return MemoryResourceCache.from_settings(settings)
