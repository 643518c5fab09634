"""Pluggable one-time blob storage backends."""

from __future__ import annotations

import logging

from secretdrop.config import Settings
from secretdrop.redis import init_redis
from secretdrop.storage.base import StorageBackend
from secretdrop.storage.filesystem import FileSystemBackend
from secretdrop.storage.memory import InMemoryBackend
from secretdrop.storage.redis import RedisBackend

logger = logging.getLogger(__name__)

__all__ = [
    "FileSystemBackend",
    "InMemoryBackend",
    "RedisBackend",
    "StorageBackend",
    "create_backend",
]


async def create_backend(settings: Settings) -> StorageBackend:
    """Build and initialize the backend selected by ``settings.storage_backend``."""
    backend: StorageBackend
    if settings.storage_backend == "filesystem":
        backend = FileSystemBackend(settings.storage_dir)
    elif settings.storage_backend == "memory":
        backend = InMemoryBackend()
    elif settings.storage_backend == "redis":
        client = await init_redis(settings.redis_url, settings.redis_max_connections)
        backend = RedisBackend(client, settings.redis_key_prefix, owns_client=True)
    else:
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")

    await backend.initialize()
    logger.info("Storage backend %s ready", backend.name)
    return backend
