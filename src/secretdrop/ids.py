"""Secret identifier generation."""

from __future__ import annotations

import secrets

from secretdrop.errors import GeneratorFault

DEFAULT_ID_BYTES = 16
MIN_ID_BYTES = 16


def generate_secret_id(num_bytes: int = DEFAULT_ID_BYTES) -> str:
    """Return a random hex identifier drawn from the OS CSPRNG.

    16 bytes gives 32 hex characters and a 2**128 id space, so no collision
    check is made against the store.

    Raises:
        ValueError: If ``num_bytes`` is below the minimum entropy.
        GeneratorFault: If the secure random source is unavailable.
    """
    if num_bytes < MIN_ID_BYTES:
        raise ValueError(f"Identifier needs at least {MIN_ID_BYTES} bytes, got {num_bytes}")
    try:
        return secrets.token_hex(num_bytes)
    except (NotImplementedError, OSError) as exc:
        raise GeneratorFault("Secure random source unavailable") from exc
