"""Cache backends: the remote Redis store and the in-process fallback.

Both backends speak the same small verb set over already-serialized string
payloads. Backends raise on failure; turning failures into misses is the job
of :class:`finlit.cache.service.CacheService`.
"""

import fnmatch
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from finlit.config import Settings
from finlit.core.logging import get_logger

logger = get_logger(__name__)

# Keys deleted per DEL call during pattern invalidation
DELETE_BATCH_SIZE = 500


class CacheBackend(ABC):
    """Interface shared by the remote and local cache stores."""

    name: str = "backend"

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored payload, or None when absent or expired."""

    @abstractmethod
    async def set(self, key: str, payload: str, ttl: int) -> None:
        """Store a payload; ttl <= 0 means no expiration."""

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern, returning the count."""

    @abstractmethod
    async def hset(self, key: str, field: str, value: str) -> None:
        """Set a hash field."""

    @abstractmethod
    async def hget(self, key: str, field: str) -> str | None:
        """Read a hash field."""

    @abstractmethod
    async def hincrby(self, key: str, field: str, delta: int) -> int:
        """Atomically add delta to an integer hash field."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the store answers."""

    async def close(self) -> None:
        """Release any held connections."""


class RemoteBackend(CacheBackend):
    """Redis-backed store shared across process instances.

    Connect timeout and the per-command retry budget are enforced by the
    redis client itself, not here.
    """

    name = "redis"

    def __init__(self, client: Redis) -> None:
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "RemoteBackend":
        """Build a backend with the configured connection parameters."""
        client = Redis.from_url(
            settings.redis_url,
            socket_connect_timeout=settings.redis_connect_timeout_ms / 1000,
            retry=Retry(ExponentialBackoff(), settings.redis_max_retries),
            retry_on_error=[RedisConnectionError, RedisTimeoutError],
            decode_responses=True,
        )
        return cls(client)

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def set(self, key: str, payload: str, ttl: int) -> None:
        if ttl > 0:
            await self.client.setex(key, ttl, payload)
        else:
            await self.client.set(key, payload)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self.client.delete(*keys))

    async def delete_pattern(self, pattern: str) -> int:
        # SCAN instead of KEYS so a large keyspace never blocks the server
        deleted = 0
        batch: list[str] = []
        async for key in self.client.scan_iter(match=pattern, count=DELETE_BATCH_SIZE):
            batch.append(key)
            if len(batch) >= DELETE_BATCH_SIZE:
                deleted += await self.delete(*batch)
                batch = []
        if batch:
            deleted += await self.delete(*batch)
        return deleted

    async def hset(self, key: str, field: str, value: str) -> None:
        await self.client.hset(key, field, value)

    async def hget(self, key: str, field: str) -> str | None:
        return await self.client.hget(key, field)

    async def hincrby(self, key: str, field: str, delta: int) -> int:
        return int(await self.client.hincrby(key, field, delta))

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self) -> None:
        await self.client.aclose()


class LocalBackend(CacheBackend):
    """In-process fallback used while Redis is unreachable.

    Values and expiry deadlines are kept in separate maps. Expiry is checked
    lazily on every read and eagerly by :meth:`sweep`, which the cache service
    runs on a fixed interval. Nothing here survives the process, and nothing
    here is shared between instances.

    Args:
        clock: Monotonic time source in seconds; injectable for tests.
    """

    name = "local"

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._values: dict[str, str] = {}
        self._expiries: dict[str, float] = {}
        self._hashes: dict[str, dict[str, str]] = {}

    def __len__(self) -> int:
        return len(self._values) + len(self._hashes)

    def _is_expired(self, key: str, now: float) -> bool:
        deadline = self._expiries.get(key)
        return deadline is not None and now >= deadline

    def _evict(self, key: str) -> bool:
        self._expiries.pop(key, None)
        existed = self._values.pop(key, None) is not None
        return self._hashes.pop(key, None) is not None or existed

    async def get(self, key: str) -> str | None:
        if key not in self._values:
            return None
        if self._is_expired(key, self._clock()):
            self._evict(key)
            return None
        return self._values[key]

    async def set(self, key: str, payload: str, ttl: int) -> None:
        self._values[key] = payload
        if ttl > 0:
            self._expiries[key] = self._clock() + ttl
        else:
            self._expiries.pop(key, None)

    async def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self._evict(key))

    async def delete_pattern(self, pattern: str) -> int:
        """Clear the whole store.

        There is no cheap pattern lookup over a plain dict, so the local store
        over-invalidates: every entry goes, matching or not.
        """
        cleared = len(self)
        self.clear()
        return cleared

    async def hset(self, key: str, field: str, value: str) -> None:
        self._hashes.setdefault(key, {})[field] = value

    async def hget(self, key: str, field: str) -> str | None:
        return self._hashes.get(key, {}).get(field)

    async def hincrby(self, key: str, field: str, delta: int) -> int:
        fields = self._hashes.setdefault(key, {})
        value = int(fields.get(field, "0")) + delta
        fields[field] = str(value)
        return value

    async def ping(self) -> bool:
        return True

    def keys(self, pattern: str = "*") -> list[str]:
        """Live keys matching a glob pattern (diagnostics and tests)."""
        now = self._clock()
        live = [k for k in self._values if not self._is_expired(k, now)]
        live.extend(self._hashes)
        return [k for k in live if fnmatch.fnmatchcase(k, pattern)]

    def sweep(self) -> int:
        """Evict every entry whose deadline has passed.

        Returns:
            Number of evicted entries
        """
        now = self._clock()
        expired = [key for key, deadline in self._expiries.items() if now >= deadline]
        for key in expired:
            self._evict(key)
        return len(expired)

    def clear(self) -> None:
        self._values.clear()
        self._expiries.clear()
        self._hashes.clear()
