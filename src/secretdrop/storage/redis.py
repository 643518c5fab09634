"""Redis storage backend.

Each secret is a plain string key ``{prefix}{secret_id}`` whose value is the
raw payload bytes. ``take`` uses GETDEL (Redis >= 6.2), or a MULTI GET+DEL
transaction on older servers, so exactly one client wins a concurrent read
across every process sharing the server.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError, ResponseError

from secretdrop.errors import DeletionFault, SecretNotFoundError, StorageFault
from secretdrop.redis import close_redis
from secretdrop.storage.base import StorageBackend

logger = logging.getLogger(__name__)


class RedisBackend(StorageBackend):
    """Stores secrets in Redis using an existing async client.

    Args:
        redis: Async Redis client created with ``decode_responses=False``.
        key_prefix: Namespace prepended to every secret id.
    """

    name = "redis"

    def __init__(
        self,
        redis: aioredis.Redis,
        key_prefix: str = "secretdrop:secret:",
        *,
        owns_client: bool = False,
    ) -> None:
        self._redis = redis
        self._prefix = key_prefix
        self._owns_client = owns_client
        self._getdel_supported = True

    def _key(self, secret_id: str) -> str:
        return f"{self._prefix}{secret_id}"

    async def put(self, secret_id: str, payload: bytes) -> None:
        try:
            await self._redis.set(self._key(secret_id), payload)
        except RedisError as exc:
            raise StorageFault(f"Failed to write secret {secret_id}") from exc

    async def exists(self, secret_id: str) -> bool:
        try:
            return bool(await self._redis.exists(self._key(secret_id)))
        except RedisError as exc:
            raise StorageFault(f"Failed to probe secret {secret_id}") from exc

    async def get(self, secret_id: str) -> bytes:
        try:
            payload = await self._redis.get(self._key(secret_id))
        except RedisError as exc:
            raise StorageFault(f"Failed to read secret {secret_id}") from exc
        if payload is None:
            raise SecretNotFoundError(secret_id)
        return payload

    async def delete(self, secret_id: str) -> None:
        try:
            await self._redis.delete(self._key(secret_id))
        except RedisError as exc:
            raise DeletionFault(secret_id, str(exc)) from exc

    async def take(self, secret_id: str) -> bytes:
        key = self._key(secret_id)
        try:
            if self._getdel_supported:
                try:
                    payload = await self._redis.getdel(key)
                except ResponseError as exc:
                    if "unknown command" not in str(exc).lower():
                        raise
                    logger.warning("Redis server lacks GETDEL (< 6.2); using MULTI GET+DEL")
                    self._getdel_supported = False
                    payload = await self._get_and_delete(key)
            else:
                payload = await self._get_and_delete(key)
        except RedisError as exc:
            raise StorageFault(f"Failed to read secret {secret_id}") from exc
        if payload is None:
            raise SecretNotFoundError(secret_id)
        return payload

    async def _get_and_delete(self, key: str) -> bytes | None:
        """GET and DEL in one MULTI/EXEC transaction for servers without GETDEL."""
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.get(key)
            pipe.delete(key)
            payload, _ = await pipe.execute()
        return payload

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError:
            logger.warning("Redis ping failed", exc_info=True)
            return False

    async def close(self) -> None:
        if self._owns_client:
            await close_redis(self._redis)
