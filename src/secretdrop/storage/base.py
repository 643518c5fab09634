"""Storage backend interface for one-time secrets.

Backends map an opaque id to opaque payload bytes. They know nothing about
scanners or consume policy; the SecretService composes ``exists``, ``get``,
``delete`` and ``take`` into the consume protocol.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from secretdrop.errors import DeletionFault

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Base interface for one-time blob storage.

    Contract:
        - ``put`` overwrites silently (last writer wins).
        - ``exists`` never raises for a missing id.
        - ``get`` raises SecretNotFoundError for a missing id and never mutates.
        - ``delete`` is idempotent and silent for a missing id.
        - ``take`` reads and removes; only one concurrent caller may win when
          the backend overrides it with a native atomic primitive.
    """

    name: str = "base"

    async def initialize(self) -> None:
        """Prepare the backing namespace. Must be safe to call repeatedly."""

    @abstractmethod
    async def put(self, secret_id: str, payload: bytes) -> None:
        """Persist ``payload`` under ``secret_id``.

        Raises:
            StorageFault: If the medium rejects the write.
        """
        ...

    @abstractmethod
    async def exists(self, secret_id: str) -> bool:
        """Return whether a record is currently stored under ``secret_id``."""
        ...

    @abstractmethod
    async def get(self, secret_id: str) -> bytes:
        """Return the stored payload.

        Raises:
            SecretNotFoundError: If no record exists.
            StorageFault: If the medium fails to read.
        """
        ...

    @abstractmethod
    async def delete(self, secret_id: str) -> None:
        """Remove the record if present.

        Raises:
            DeletionFault: If the medium fails to remove an existing record.
        """
        ...

    async def take(self, secret_id: str) -> bytes:
        """Read and remove a record.

        Not atomic here; backends with a native read-and-remove primitive
        override this. A failed removal after a successful read is logged
        and the payload is still returned.
        """
        payload = await self.get(secret_id)
        try:
            await self.delete(secret_id)
        except DeletionFault:
            logger.error("Secret %s was read but could not be deleted", secret_id, exc_info=True)
        return payload

    async def ping(self) -> bool:
        """Return whether the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release any resources held by the backend."""
