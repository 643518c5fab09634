"""One-time secret service layer.

Creates secrets under fresh random ids and consumes them: check existence,
read, then delete, so that a payload is disclosed at most once. Deletion is
skipped when the caller asks to preserve the record (automated scanners).
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from typing import Literal

from secretdrop.errors import SecretNotFoundError, StorageFault, ValidationError
from secretdrop.ids import DEFAULT_ID_BYTES, generate_secret_id
from secretdrop.services.locks import KeyedLocks
from secretdrop.storage.base import StorageBackend

logger = logging.getLogger(__name__)

ConsumeMode = Literal["locked", "unlocked"]


class SecretService:
    """Service for creating and consuming one-time secrets.

    In ``locked`` mode every consume of a given id runs under a per-id lock
    and removes the record with the backend's ``take``, so exactly one of
    any number of concurrent consumers sees the payload. ``unlocked`` mode
    runs exists/get/delete with no coordination; two concurrent consumers
    may both pass the existence check and both receive the payload.

    Args:
        backend: Storage backend holding the payloads.
        id_bytes: Entropy of generated ids in bytes.
        consume_mode: ``locked`` or ``unlocked``.
        id_generator: Callable returning a fresh id for a byte length.
    """

    def __init__(
        self,
        backend: StorageBackend,
        *,
        id_bytes: int = DEFAULT_ID_BYTES,
        consume_mode: ConsumeMode = "locked",
        id_generator: Callable[[int], str] = generate_secret_id,
    ) -> None:
        self.backend = backend
        self.id_bytes = id_bytes
        self.consume_mode = consume_mode
        self._generate_id = id_generator
        self._locks = KeyedLocks()

    async def create_secret(self, payload: str | bytes) -> str:
        """Store a new secret and return its id.

        Args:
            payload: Opaque client ciphertext. Text is stored as UTF-8.

        Returns:
            The generated secret id.

        Raises:
            ValidationError: If the payload is empty or text that cannot be
                encoded as UTF-8 (lone surrogates).
            GeneratorFault: If no secure id can be generated.
            StorageFault: If the backend rejects the write.
        """
        if not payload:
            raise ValidationError("Encrypted data is required")
        try:
            data = payload.encode("utf-8") if isinstance(payload, str) else payload
        except UnicodeEncodeError as exc:
            raise ValidationError("Encrypted data must be valid UTF-8 text") from exc

        secret_id = self._generate_id(self.id_bytes)
        await self.backend.put(secret_id, data)
        logger.debug("Stored secret %s (%d bytes)", secret_id, len(data))
        return secret_id

    async def consume_secret(self, secret_id: str, *, preserve: bool = False) -> bytes:
        """Return a secret's payload and remove it from the store.

        Args:
            secret_id: Id returned by ``create_secret``.
            preserve: Read without deleting, leaving the secret consumable.

        Raises:
            SecretNotFoundError: If the id is absent or already consumed.
            StorageFault: If the backend fails to read.
        """
        guard = (
            self._locks.hold(secret_id)
            if self.consume_mode == "locked"
            else contextlib.nullcontext()
        )
        async with guard:
            if not await self.backend.exists(secret_id):
                raise SecretNotFoundError(secret_id)

            if preserve:
                payload = await self.backend.get(secret_id)
                logger.info("Secret %s read without deletion", secret_id)
                return payload

            if self.consume_mode == "locked":
                return await self.backend.take(secret_id)

            payload = await self.backend.get(secret_id)
            await self._discard(secret_id)
            return payload

    async def reveal_secret(self, secret_id: str, *, preserve: bool = False) -> str:
        """Consume a secret and decode its payload as UTF-8 text.

        Raises:
            SecretNotFoundError: If the id is absent or already consumed.
            StorageFault: If the backend fails to read or the payload is not text.
        """
        payload = await self.consume_secret(secret_id, preserve=preserve)
        try:
            return payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StorageFault(f"Secret {secret_id} does not hold UTF-8 text") from exc

    async def _discard(self, secret_id: str) -> None:
        """Delete a secret that has already been read. Failures are logged, never raised."""
        try:
            await self.backend.delete(secret_id)
        except Exception:
            logger.error("Secret %s was read but could not be deleted", secret_id, exc_info=True)
