"""Caching layer for FinLit.

Redis-backed read-through cache with an in-process fallback, deterministic
keys and pattern-based invalidation.
"""

from finlit.cache.backends import CacheBackend, LocalBackend, RemoteBackend
from finlit.cache.keys import CacheKeys
from finlit.cache.read_through import CachedResult, cached_fetch
from finlit.cache.service import (
    AvailabilityState,
    CacheAvailability,
    CacheService,
    get_cache_service,
    set_cache_service,
)

__all__ = [
    # Backends
    "CacheBackend",
    "LocalBackend",
    "RemoteBackend",
    # Facade
    "AvailabilityState",
    "CacheAvailability",
    "CacheService",
    "get_cache_service",
    "set_cache_service",
    # Keys and read path
    "CacheKeys",
    "CachedResult",
    "cached_fetch",
]
