"""Filesystem storage backend: one file per secret, named by its id.

Layout::

    storage_dir/
        3f9c...e1      <- payload bytes, nothing else
        .tmp-XXXX      <- in-flight write, renamed into place when complete
        .claim-ID-XXXX <- record claimed by a consumer, unlinked after read

Ids are restricted to ``[A-Za-z0-9_-]`` so they can never name a path outside
``storage_dir`` or collide with the dot-prefixed working files.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import secrets
import tempfile
from pathlib import Path

from secretdrop.errors import DeletionFault, SecretNotFoundError, StorageFault
from secretdrop.storage.base import StorageBackend

logger = logging.getLogger(__name__)

_SAFE_ID = re.compile(r"[A-Za-z0-9_-]{1,128}")


class FileSystemBackend(StorageBackend):
    """Stores each secret as a file inside ``storage_dir``.

    Blocking file I/O runs in worker threads via ``asyncio.to_thread``.
    ``take`` claims a record by renaming it, which the filesystem performs
    atomically, so only one consumer can win even across processes sharing
    the directory. If the rename fails for any reason other than the record
    being gone, the failure is logged and the record is read in place.
    """

    name = "filesystem"

    def __init__(self, storage_dir: str | Path) -> None:
        self._dir = Path(storage_dir)

    @property
    def storage_dir(self) -> Path:
        return self._dir

    def _path_for(self, secret_id: str) -> Path | None:
        """Return the record path, or None for ids that are not safe filenames."""
        if not _SAFE_ID.fullmatch(secret_id):
            return None
        return self._dir / secret_id

    async def initialize(self) -> None:
        try:
            await asyncio.to_thread(self._dir.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFault(f"Cannot create storage directory {self._dir}") from exc

    async def put(self, secret_id: str, payload: bytes) -> None:
        path = self._path_for(secret_id)
        if path is None:
            raise StorageFault(f"Refusing to store unsafe secret id {secret_id!r}")
        await self.initialize()

        def _write() -> None:
            fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=".tmp-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
                raise

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise StorageFault(f"Failed to write secret {secret_id}") from exc

    async def exists(self, secret_id: str) -> bool:
        path = self._path_for(secret_id)
        if path is None:
            return False
        return await asyncio.to_thread(path.is_file)

    async def get(self, secret_id: str) -> bytes:
        path = self._path_for(secret_id)
        if path is None:
            raise SecretNotFoundError(secret_id)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except (FileNotFoundError, IsADirectoryError):
            raise SecretNotFoundError(secret_id) from None
        except OSError as exc:
            raise StorageFault(f"Failed to read secret {secret_id}") from exc

    async def delete(self, secret_id: str) -> None:
        path = self._path_for(secret_id)
        if path is None:
            return
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise DeletionFault(secret_id, str(exc)) from exc

    async def take(self, secret_id: str) -> bytes:
        path = self._path_for(secret_id)
        if path is None:
            raise SecretNotFoundError(secret_id)
        claim = self._dir / f".claim-{secret_id}-{secrets.token_hex(8)}"

        try:
            await asyncio.to_thread(os.rename, path, claim)
        except FileNotFoundError:
            raise SecretNotFoundError(secret_id) from None
        except OSError as exc:
            # The record cannot be removed, but it is still readable.
            logger.error(
                "%s; returning it without removal",
                DeletionFault(secret_id, str(exc)),
                exc_info=True,
            )
            return await self.get(secret_id)

        try:
            payload = await asyncio.to_thread(claim.read_bytes)
        except OSError as exc:
            # A read fault must leave the record consumable.
            try:
                await asyncio.to_thread(os.replace, claim, path)
            except OSError:
                logger.error("Could not restore claimed secret %s", secret_id, exc_info=True)
            raise StorageFault(f"Failed to read secret {secret_id}") from exc

        try:
            await asyncio.to_thread(claim.unlink)
        except OSError:
            logger.error(
                "Secret %s was read but its claim file could not be deleted",
                secret_id,
                exc_info=True,
            )
        return payload

    async def ping(self) -> bool:
        return await asyncio.to_thread(os.access, self._dir, os.W_OK)
