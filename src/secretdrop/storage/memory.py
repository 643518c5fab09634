"""In-process dict-backed storage backend."""

from __future__ import annotations

from secretdrop.errors import SecretNotFoundError
from secretdrop.storage.base import StorageBackend


class InMemoryBackend(StorageBackend):
    """Keeps secrets in a dict. Contents are lost when the process exits.

    Every operation completes without yielding to the event loop, so
    ``take`` is atomic within a single process.
    """

    name = "memory"

    def __init__(self) -> None:
        self._records: dict[str, bytes] = {}

    async def put(self, secret_id: str, payload: bytes) -> None:
        self._records[secret_id] = bytes(payload)

    async def exists(self, secret_id: str) -> bool:
        return secret_id in self._records

    async def get(self, secret_id: str) -> bytes:
        try:
            return self._records[secret_id]
        except KeyError:
            raise SecretNotFoundError(secret_id) from None

    async def delete(self, secret_id: str) -> None:
        self._records.pop(secret_id, None)

    async def take(self, secret_id: str) -> bytes:
        try:
            return self._records.pop(secret_id)
        except KeyError:
            raise SecretNotFoundError(secret_id) from None

    def __len__(self) -> int:
        return len(self._records)
