"""Tests for the Redis storage backend against a mocked async client."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from secretdrop.errors import DeletionFault, SecretNotFoundError, StorageFault
from secretdrop.storage.redis import RedisBackend


@pytest.fixture
def redis_client() -> AsyncMock:
    client = AsyncMock()
    client.exists.return_value = 0
    client.get.return_value = None
    client.getdel.return_value = None
    client.ping.return_value = True
    return client


@pytest.fixture
def backend(redis_client: AsyncMock) -> RedisBackend:
    return RedisBackend(redis_client, key_prefix="test:")


class TestRedisBackend:
    @pytest.mark.asyncio
    async def test_put_stores_raw_bytes_under_prefixed_key(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        await backend.put("abc", b"\x00payload")

        redis_client.set.assert_awaited_once_with("test:abc", b"\x00payload")

    @pytest.mark.asyncio
    async def test_exists(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        assert await backend.exists("abc") is False

        redis_client.exists.return_value = 1
        assert await backend.exists("abc") is True
        redis_client.exists.assert_awaited_with("test:abc")

    @pytest.mark.asyncio
    async def test_get_returns_payload(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        redis_client.get.return_value = b"payload"

        assert await backend.get("abc") == b"payload"
        redis_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_missing_raises_not_found(self, backend: RedisBackend) -> None:
        with pytest.raises(SecretNotFoundError):
            await backend.get("abc")

    @pytest.mark.asyncio
    async def test_take_uses_getdel(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        redis_client.getdel.return_value = b"payload"

        assert await backend.take("abc") == b"payload"
        redis_client.getdel.assert_awaited_once_with("test:abc")

    @pytest.mark.asyncio
    async def test_take_missing_raises_not_found(self, backend: RedisBackend) -> None:
        with pytest.raises(SecretNotFoundError):
            await backend.take("abc")

    @pytest.mark.asyncio
    async def test_delete(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        await backend.delete("abc")

        redis_client.delete.assert_awaited_once_with("test:abc")

    @pytest.mark.asyncio
    async def test_connection_errors_become_storage_faults(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        redis_client.set.side_effect = RedisConnectionError("down")
        redis_client.get.side_effect = RedisConnectionError("down")
        redis_client.exists.side_effect = RedisConnectionError("down")

        with pytest.raises(StorageFault):
            await backend.put("abc", b"payload")
        with pytest.raises(StorageFault):
            await backend.get("abc")
        with pytest.raises(StorageFault):
            await backend.exists("abc")

    @pytest.mark.asyncio
    async def test_delete_error_is_a_deletion_fault(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        redis_client.delete.side_effect = RedisConnectionError("down")

        with pytest.raises(DeletionFault):
            await backend.delete("abc")

    @pytest.mark.asyncio
    async def test_ping(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        assert await backend.ping() is True

        redis_client.ping.side_effect = RedisConnectionError("down")
        assert await backend.ping() is False

    @pytest.mark.asyncio
    async def test_close_only_closes_owned_client(self, redis_client: AsyncMock) -> None:
        await RedisBackend(redis_client).close()
        redis_client.aclose.assert_not_awaited()

        await RedisBackend(redis_client, owns_client=True).close()
        redis_client.aclose.assert_awaited_once()


class TestRedisTakeFallback:
    """Servers older than 6.2 reject GETDEL; take falls back to MULTI GET+DEL."""

    @staticmethod
    def _pipeline(redis_client: AsyncMock, result: list) -> MagicMock:
        pipe = MagicMock()
        pipe.__aenter__.return_value = pipe
        pipe.execute = AsyncMock(return_value=result)
        redis_client.pipeline = MagicMock(return_value=pipe)
        return pipe

    @pytest.mark.asyncio
    async def test_unknown_getdel_uses_transaction(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        redis_client.getdel.side_effect = ResponseError("unknown command 'getdel'")
        pipe = self._pipeline(redis_client, [b"payload", 1])

        assert await backend.take("abc") == b"payload"

        redis_client.pipeline.assert_called_once_with(transaction=True)
        pipe.get.assert_called_once_with("test:abc")
        pipe.delete.assert_called_once_with("test:abc")

    @pytest.mark.asyncio
    async def test_fallback_is_remembered(self, backend: RedisBackend, redis_client: AsyncMock) -> None:
        redis_client.getdel.side_effect = ResponseError("ERR unknown command `GETDEL`")
        self._pipeline(redis_client, [b"payload", 1])

        await backend.take("abc")
        await backend.take("abc")

        assert redis_client.getdel.await_count == 1

    @pytest.mark.asyncio
    async def test_fallback_missing_record_is_not_found(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        redis_client.getdel.side_effect = ResponseError("unknown command 'getdel'")
        self._pipeline(redis_client, [None, 0])

        with pytest.raises(SecretNotFoundError):
            await backend.take("abc")

    @pytest.mark.asyncio
    async def test_other_response_errors_are_storage_faults(
        self, backend: RedisBackend, redis_client: AsyncMock
    ) -> None:
        redis_client.getdel.side_effect = ResponseError("WRONGTYPE Operation against a key")

        with pytest.raises(StorageFault):
            await backend.take("abc")
