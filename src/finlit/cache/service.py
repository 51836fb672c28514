"""CacheService - one cache facade over Redis and an in-process fallback.

The facade picks a store per call: Redis while it is known to be reachable,
the local fallback otherwise. Every public operation is best effort and never
raises; a failing cache behaves like an empty one, so a Redis outage costs
latency, not correctness.

Availability is tracked by a small state object owned by each facade
instance. It changes only on connection lifecycle events (connect, close,
connection errors seen on a command) and on the periodic liveness probe.

Usage with FastAPI:
    ```python
    from finlit.cache import CacheService, get_cache_service

    @router.get("/things")
    async def things(cache: CacheService = Depends(get_cache_service)):
        ...
    ```
"""

import asyncio
import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from finlit.cache.backends import CacheBackend, LocalBackend, RemoteBackend
from finlit.config import Settings
from finlit.core.logging import get_logger

logger = get_logger(__name__)

# Errors meaning the remote store itself is unreachable, not just a bad command
CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    RedisConnectionError,
    RedisTimeoutError,
    ConnectionError,
    OSError,
    asyncio.TimeoutError,
)


class AvailabilityState(str, Enum):
    """Remote store reachability as last observed."""

    UNKNOWN = "unknown"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class CacheAvailability:
    """Remote availability state machine.

    Starts UNKNOWN (treated as unavailable) and moves between AVAILABLE and
    UNAVAILABLE. Transitions are logged once; repeated marks are no-ops.
    """

    def __init__(self) -> None:
        self._state = AvailabilityState.UNKNOWN
        self._changed_at = time.time()

    @property
    def state(self) -> AvailabilityState:
        return self._state

    @property
    def is_up(self) -> bool:
        return self._state is AvailabilityState.AVAILABLE

    @property
    def changed_at(self) -> float:
        return self._changed_at

    def mark_up(self, reason: str) -> None:
        self._transition(AvailabilityState.AVAILABLE, reason)

    def mark_down(self, reason: str, error: BaseException | None = None) -> None:
        self._transition(AvailabilityState.UNAVAILABLE, reason, error)

    def _transition(
        self,
        state: AvailabilityState,
        reason: str,
        error: BaseException | None = None,
    ) -> None:
        if state is self._state:
            return
        previous = self._state
        self._state = state
        self._changed_at = time.time()
        log = logger.info if state is AvailabilityState.AVAILABLE else logger.warning
        log(
            "cache_availability_changed",
            previous=previous.value,
            state=state.value,
            reason=reason,
            error=str(error) if error else None,
        )


@dataclass
class CacheStats:
    """Counters for cache observability."""

    hits: int = 0
    misses: int = 0
    errors: int = 0
    fallback_operations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "hit_rate": round(self.hit_rate, 4)}


class CacheService:
    """Read-through cache facade with graceful degradation.

    Args:
        remote: Redis backend, or None to run on the local store only
        local: In-process fallback store
        sweep_interval: Seconds between local expiry sweeps
        probe_interval: Seconds between remote liveness probes
    """

    def __init__(
        self,
        remote: CacheBackend | None,
        local: LocalBackend | None = None,
        *,
        sweep_interval: float = 60.0,
        probe_interval: float = 30.0,
    ) -> None:
        self.remote = remote
        self.local = local if local is not None else LocalBackend()
        self.availability = CacheAvailability()
        self.sweep_interval = sweep_interval
        self.probe_interval = probe_interval
        self._stats = CacheStats()
        self._tasks: list[asyncio.Task[None]] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheService":
        remote = RemoteBackend.from_settings(settings) if settings.cache_enabled else None
        return cls(
            remote,
            sweep_interval=settings.cache_sweep_interval_seconds,
            probe_interval=settings.cache_probe_interval_seconds,
        )

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> bool:
        """Ping the remote store once and set the initial availability."""
        if self.remote is None:
            self.availability.mark_down("remote_disabled")
            return False
        return await self.probe()

    async def probe(self) -> bool:
        """Liveness probe; the only periodic writer of the availability state."""
        if self.remote is None:
            return False
        try:
            alive = await self.remote.ping()
        except Exception as e:
            self.availability.mark_down("probe_failed", e)
            return False
        if alive:
            self.availability.mark_up("probe_ok")
        else:
            self.availability.mark_down("probe_negative")
        return alive

    async def start(self) -> None:
        """Connect and launch the background sweep and probe tasks."""
        await self.connect()
        self._tasks = [
            asyncio.create_task(
                self._every(self.sweep_interval, self._sweep_local, "local_sweep")
            ),
        ]
        if self.remote is not None:
            self._tasks.append(
                asyncio.create_task(
                    self._every(self.probe_interval, self.probe, "remote_probe")
                )
            )
        logger.info(
            "cache_started",
            remote=self.remote is not None,
            available=self.is_available(),
        )

    async def close(self) -> None:
        """Stop background tasks and close the remote connection gracefully."""
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        if self.remote is not None:
            try:
                await self.remote.close()
            except Exception as e:
                logger.warning("cache_close_failed", error=str(e))
        self.availability.mark_down("closed")
        logger.info("cache_closed")

    async def _every(
        self, interval: float, job: Callable[[], Awaitable[Any]], name: str
    ) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await job()
            except Exception as e:
                logger.warning("cache_background_job_failed", job=name, error=str(e))

    async def _sweep_local(self) -> int:
        evicted = self.local.sweep()
        if evicted:
            logger.debug("cache_local_sweep", evicted=evicted)
        return evicted

    # -------------------------------------------------------------------------
    # Store selection
    # -------------------------------------------------------------------------

    def is_available(self) -> bool:
        """Whether the remote store is currently selected."""
        return self.remote is not None and self.availability.is_up

    def _live_remote(self) -> CacheBackend | None:
        return self.remote if self.is_available() else None

    def _select(self) -> CacheBackend:
        remote = self._live_remote()
        if remote is not None:
            return remote
        self._stats.fallback_operations += 1
        return self.local

    def _record_failure(
        self, event: str, backend: CacheBackend, error: Exception, **context: Any
    ) -> None:
        self._stats.errors += 1
        logger.warning(event, backend=backend.name, error=str(error), **context)
        if backend is self.remote and isinstance(error, CONNECTION_ERRORS):
            self.availability.mark_down("connection_error", error)

    # -------------------------------------------------------------------------
    # Key/value operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Return the cached value or None.

        None means "not usable": a true miss, an expired entry, a decode
        failure or an unreachable store all look the same to callers.
        """
        backend = self._select()
        try:
            payload = await backend.get(key)
        except Exception as e:
            self._record_failure("cache_get_failed", backend, e, cache_key=key)
            return None

        if payload is None:
            self._stats.misses += 1
            logger.debug("cache_miss", cache_key=key, backend=backend.name)
            return None

        try:
            value = json.loads(payload)
        except (TypeError, ValueError) as e:
            self._record_failure("cache_decode_failed", backend, e, cache_key=key)
            return None

        self._stats.hits += 1
        logger.debug("cache_hit", cache_key=key, backend=backend.name)
        return value

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Store a JSON-serializable value.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Seconds to live; values <= 0 store without expiration

        Returns:
            True if the write is believed to have landed
        """
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            self._stats.errors += 1
            logger.warning("cache_serialize_failed", cache_key=key, error=str(e))
            return False

        backend = self._select()
        try:
            await backend.set(key, payload, ttl)
        except Exception as e:
            self._record_failure("cache_set_failed", backend, e, cache_key=key)
            return False

        logger.debug("cache_set", cache_key=key, ttl=ttl, backend=backend.name)
        return True

    async def delete(self, key: str) -> bool:
        """Delete a key from Redis (when reachable) and from the local store.

        The local store is always cleared so an entry written during an
        earlier outage cannot resurface after a failover.
        """
        ok = True
        remote = self._live_remote()
        if remote is not None:
            try:
                await remote.delete(key)
            except Exception as e:
                self._record_failure("cache_delete_failed", remote, e, cache_key=key)
                ok = False
        await self.local.delete(key)
        logger.debug("cache_invalidated", cache_key=key)
        return ok

    async def delete_pattern(self, pattern: str) -> bool:
        """Delete all keys matching a glob pattern.

        Exact on Redis (SCAN then DEL); on the local store the whole map is
        cleared, since over-invalidating is preferred to serving stale data.
        """
        ok = True
        removed = 0
        remote = self._live_remote()
        if remote is not None:
            try:
                removed = await remote.delete_pattern(pattern)
            except Exception as e:
                self._record_failure(
                    "cache_pattern_invalidate_failed", remote, e, pattern=pattern
                )
                ok = False
        await self.local.delete_pattern(pattern)
        logger.debug("cache_pattern_invalidated", pattern=pattern, count=removed)
        return ok

    # -------------------------------------------------------------------------
    # Counter (hash) operations
    # -------------------------------------------------------------------------

    async def hset(self, key: str, field: str, value: int) -> bool:
        backend = self._select()
        try:
            await backend.hset(key, field, str(value))
        except Exception as e:
            self._record_failure("cache_hset_failed", backend, e, cache_key=key)
            return False
        return True

    async def hget(self, key: str, field: str) -> int | None:
        backend = self._select()
        try:
            raw = await backend.hget(key, field)
            return int(raw) if raw is not None else None
        except Exception as e:
            self._record_failure("cache_hget_failed", backend, e, cache_key=key)
            return None

    async def hincrby(self, key: str, field: str, delta: int = 1) -> int:
        """Increment a hash counter, returning the new value (0 on failure)."""
        backend = self._select()
        try:
            return await backend.hincrby(key, field, delta)
        except Exception as e:
            self._record_failure("cache_hincrby_failed", backend, e, cache_key=key)
            return 0

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def stats(self) -> dict[str, Any]:
        available = self.is_available()
        selected = self.remote if available and self.remote else self.local
        return {
            "backend": selected.name,
            "available": available,
            "state": self.availability.state.value,
            "state_changed_at": self.availability.changed_at,
            "local_entries": len(self.local),
            **self._stats.to_dict(),
        }


# Process-wide cache service (set during app startup)
_cache_service: CacheService | None = None


def set_cache_service(cache: CacheService | None) -> None:
    """Install the process-wide cache service (called from the app lifespan)."""
    global _cache_service
    _cache_service = cache


def get_cache_service() -> CacheService:
    """FastAPI dependency for CacheService.

    Falls back to a local-only service when startup has not installed one,
    so request handling never depends on cache wiring.
    """
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService(remote=None)
    return _cache_service
