"""Async Redis client lifecycle for the Redis storage backend."""

import logging

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


async def init_redis(redis_url: str, max_connections: int = 20) -> aioredis.Redis:
    """Create an async Redis client for secret payloads and verify it with a ping.

    Responses are left as raw bytes (``decode_responses=False``) so stored
    ciphertext comes back byte-for-byte; the client never decodes payloads.

    Args:
        redis_url: Connection URL, e.g. ``redis://localhost:6379/0``.
        max_connections: Size of the connection pool shared by all requests.
    """
    client = aioredis.from_url(
        redis_url,
        decode_responses=False,
        max_connections=max_connections,
    )
    await client.ping()
    logger.info("Connected to Redis (pool size %d)", max_connections)
    return client


async def close_redis(client: aioredis.Redis) -> None:
    """Close the client and release its pooled connections."""
    await client.aclose()
