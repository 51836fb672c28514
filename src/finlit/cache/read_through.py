"""Generic read-through helper shared by every cached read endpoint."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from finlit.cache.service import CacheService
from finlit.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CachedResult:
    """A response payload plus whether it came from the cache."""

    data: Any
    from_cache: bool


async def cached_fetch(
    cache: CacheService,
    key: str,
    loader: Callable[[], Awaitable[Any]],
    ttl: int,
) -> CachedResult:
    """Serve ``key`` from the cache, computing and storing it on a miss.

    The loader runs only on a miss. Its errors propagate unchanged; cache
    errors never do. Empty results are cached like any other payload.

    Args:
        cache: Cache facade
        key: Deterministic cache key for the query
        loader: Coroutine factory computing the JSON-shaped payload
        ttl: Seconds to keep the computed payload

    Returns:
        CachedResult with the payload and its provenance
    """
    cached = await cache.get(key)
    if cached is not None:
        return CachedResult(data=cached, from_cache=True)

    data = await loader()
    await cache.set(key, data, ttl)
    logger.debug("cache_populated", cache_key=key, ttl=ttl)
    return CachedResult(data=data, from_cache=False)
