"""Error types raised by the secret store and consume service.

Validation and not-found errors are expected control flow and map to 4xx
responses. Storage and generator faults are operator-facing and map to a
generic 500. Deletion faults are raised by backends but always absorbed by
the consume service after a successful read.
"""

from __future__ import annotations


class SecretDropError(Exception):
    """Base class for all secretdrop errors."""


class ValidationError(SecretDropError):
    """Caller input is missing the required payload."""


class SecretNotFoundError(SecretDropError):
    """The secret id is absent or has already been consumed."""

    def __init__(self, secret_id: str) -> None:
        super().__init__(f"Secret not found: {secret_id}")
        self.secret_id = secret_id


class StorageFault(SecretDropError):
    """The storage medium rejected a write or read."""


class DeletionFault(SecretDropError):
    """A record could not be removed after it was read."""

    def __init__(self, secret_id: str, reason: str) -> None:
        super().__init__(f"Failed to delete secret {secret_id}: {reason}")
        self.secret_id = secret_id


class GeneratorFault(SecretDropError):
    """The secure random source is unavailable, so no id can be issued."""
