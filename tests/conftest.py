"""Shared fixtures and test backends for secretdrop tests."""

from __future__ import annotations

import asyncio
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from secretdrop.app import create_app
from secretdrop.config import Settings
from secretdrop.errors import DeletionFault, SecretNotFoundError
from secretdrop.services.secret_service import SecretService
from secretdrop.storage.base import StorageBackend
from secretdrop.storage.memory import InMemoryBackend


class SlowBackend(InMemoryBackend):
    """In-memory backend that yields to the event loop on every call.

    Widens the window between the existence check and the delete so that
    concurrent consumers interleave deterministically.
    """

    def __init__(self, delay: float = 0.01) -> None:
        super().__init__()
        self.delay = delay

    async def exists(self, secret_id: str) -> bool:
        await asyncio.sleep(self.delay)
        return await super().exists(secret_id)

    async def get(self, secret_id: str) -> bytes:
        await asyncio.sleep(self.delay)
        return await super().get(secret_id)

    async def delete(self, secret_id: str) -> None:
        await asyncio.sleep(self.delay)
        await super().delete(secret_id)

    async def take(self, secret_id: str) -> bytes:
        await asyncio.sleep(self.delay)
        return await super().take(secret_id)


class UndeletableBackend(StorageBackend):
    """Backend whose delete always fails; relies on the default ``take``."""

    name = "undeletable"

    def __init__(self) -> None:
        self.records: dict[str, bytes] = {}
        self.delete_calls = 0

    async def put(self, secret_id: str, payload: bytes) -> None:
        self.records[secret_id] = payload

    async def exists(self, secret_id: str) -> bool:
        return secret_id in self.records

    async def get(self, secret_id: str) -> bytes:
        if secret_id not in self.records:
            raise SecretNotFoundError(secret_id)
        return self.records[secret_id]

    async def delete(self, secret_id: str) -> None:
        self.delete_calls += 1
        raise DeletionFault(secret_id, "read-only filesystem")


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def slow_backend() -> SlowBackend:
    return SlowBackend()


@pytest.fixture
def undeletable_backend() -> UndeletableBackend:
    return UndeletableBackend()


@pytest.fixture
def service(memory_backend: InMemoryBackend) -> SecretService:
    return SecretService(memory_backend)


@pytest.fixture
def settings() -> Settings:
    """Settings for an app backed by in-memory storage, isolated from the environment."""
    return Settings(_env_file=None, storage_backend="memory", log_level="DEBUG")


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    """Test client with the application lifespan running."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
