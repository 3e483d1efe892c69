"""Entity snapshot caching.

Adapters:
    - MemoryResourceCache: Thread-safe in-memory with TTL (default)
    - NullCache: Always misses (caching disabled)
"""

from .cache import (
    DEFAULT_TTL,
    CacheAdapter,
    CacheEntry,
    CacheStore,
    MemoryResourceCache,
    NullCache,
)

__all__ = [
    "CacheAdapter",
    "CacheEntry",
    "CacheStore",
    "MemoryResourceCache",
    "NullCache",
    "DEFAULT_TTL",
]
