"""Tests for the cache backends.

LocalBackend is exercised directly with a fake clock; RemoteBackend against
a mocked redis.asyncio client.
"""

from unittest.mock import MagicMock

import pytest

from finlit.cache import LocalBackend, RemoteBackend
from finlit.cache.backends import DELETE_BATCH_SIZE

# =============================================================================
# LocalBackend
# =============================================================================


class TestLocalBackendExpiry:
    """TTL handling of the in-process store."""

    @pytest.mark.asyncio
    async def test_value_readable_before_deadline(self, local_backend, clock) -> None:
        await local_backend.set("k", '"v"', ttl=10)
        clock.advance(9.9)

        assert await local_backend.get("k") == '"v"'

    @pytest.mark.asyncio
    async def test_value_gone_at_deadline(self, local_backend, clock) -> None:
        await local_backend.set("k", '"v"', ttl=10)
        clock.advance(10)

        assert await local_backend.get("k") is None
        assert "k" not in local_backend.keys()

    @pytest.mark.asyncio
    async def test_zero_ttl_never_expires(self, local_backend, clock) -> None:
        await local_backend.set("k", '"v"', ttl=0)
        clock.advance(10**9)

        assert await local_backend.get("k") == '"v"'

    @pytest.mark.asyncio
    async def test_overwrite_without_ttl_clears_deadline(self, local_backend, clock) -> None:
        await local_backend.set("k", "1", ttl=5)
        await local_backend.set("k", "2", ttl=0)
        clock.advance(60)

        assert await local_backend.get("k") == "2"

    @pytest.mark.asyncio
    async def test_sweep_evicts_only_passed_deadlines(self, local_backend, clock) -> None:
        await local_backend.set("short", "1", ttl=5)
        await local_backend.set("long", "2", ttl=500)
        await local_backend.set("forever", "3", ttl=0)
        clock.advance(6)

        evicted = local_backend.sweep()

        assert evicted == 1
        assert sorted(local_backend.keys()) == ["forever", "long"]


class TestLocalBackendOperations:
    @pytest.mark.asyncio
    async def test_delete_reports_existing_keys(self, local_backend) -> None:
        await local_backend.set("a", "1", ttl=0)

        assert await local_backend.delete("a", "missing") == 1
        assert await local_backend.get("a") is None

    @pytest.mark.asyncio
    async def test_delete_pattern_clears_everything(self, local_backend) -> None:
        await local_backend.set("learning-content:list:1:10", "[]", ttl=0)
        await local_backend.set("unrelated:key", "{}", ttl=0)
        await local_backend.hset("learning-content:views:1", "views", "3")

        cleared = await local_backend.delete_pattern("learning-content:list:*")

        assert cleared == 3
        assert len(local_backend) == 0

    @pytest.mark.asyncio
    async def test_hincrby_starts_from_zero(self, local_backend) -> None:
        assert await local_backend.hincrby("h", "views", 1) == 1
        assert await local_backend.hincrby("h", "views", 4) == 5
        assert await local_backend.hget("h", "views") == "5"

    @pytest.mark.asyncio
    async def test_hset_overrides_counter(self, local_backend) -> None:
        await local_backend.hincrby("h", "views", 7)
        await local_backend.hset("h", "views", "2")

        assert await local_backend.hincrby("h", "views", 1) == 3

    @pytest.mark.asyncio
    async def test_ping_always_succeeds(self) -> None:
        assert await LocalBackend().ping() is True


# =============================================================================
# RemoteBackend
# =============================================================================


class TestRemoteBackend:
    """Command mapping onto the redis client."""

    @pytest.mark.asyncio
    async def test_set_with_ttl_uses_setex(self, mock_redis: MagicMock) -> None:
        backend = RemoteBackend(mock_redis)

        await backend.set("k", "payload", ttl=3600)

        mock_redis.setex.assert_awaited_once_with("k", 3600, "payload")
        mock_redis.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_without_ttl_uses_plain_set(self, mock_redis: MagicMock) -> None:
        backend = RemoteBackend(mock_redis)

        await backend.set("k", "payload", ttl=0)

        mock_redis.set.assert_awaited_once_with("k", "payload")
        mock_redis.setex.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_without_keys_skips_command(self, mock_redis: MagicMock) -> None:
        backend = RemoteBackend(mock_redis)

        assert await backend.delete() == 0
        mock_redis.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_pattern_scans_and_batches(
        self, mock_redis: MagicMock, async_iter
    ) -> None:
        keys = [f"learning-content:list:{i}" for i in range(DELETE_BATCH_SIZE + 3)]
        mock_redis.scan_iter = MagicMock(return_value=async_iter(keys))
        mock_redis.delete.side_effect = lambda *batch: len(batch)
        backend = RemoteBackend(mock_redis)

        deleted = await backend.delete_pattern("learning-content:list:*")

        assert deleted == len(keys)
        mock_redis.scan_iter.assert_called_once_with(
            match="learning-content:list:*", count=DELETE_BATCH_SIZE
        )
        assert mock_redis.delete.await_count == 2
        first_batch = mock_redis.delete.await_args_list[0].args
        assert len(first_batch) == DELETE_BATCH_SIZE

    @pytest.mark.asyncio
    async def test_delete_pattern_with_no_matches(self, mock_redis: MagicMock) -> None:
        backend = RemoteBackend(mock_redis)

        assert await backend.delete_pattern("nothing:*") == 0
        mock_redis.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_hincrby_returns_int(self, mock_redis: MagicMock) -> None:
        mock_redis.hincrby.return_value = "12"
        backend = RemoteBackend(mock_redis)

        assert await backend.hincrby("h", "views", 1) == 12

    @pytest.mark.asyncio
    async def test_close_uses_aclose(self, mock_redis: MagicMock) -> None:
        await RemoteBackend(mock_redis).close()

        mock_redis.aclose.assert_awaited_once()

    def test_from_settings_builds_client(self, test_settings) -> None:
        backend = RemoteBackend.from_settings(test_settings)

        kwargs = backend.client.connection_pool.connection_kwargs
        assert kwargs["host"] == test_settings.redis_host
        assert kwargs["port"] == test_settings.redis_port
        assert kwargs["db"] == 15
        assert kwargs["socket_connect_timeout"] == 5.0
