"""Pydantic v2 schemas for the one-time secrets API.

Field names on the wire are camelCase (``encryptedData``) to match the
browser client; Python attributes use snake_case through aliases.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CreateSecretRequest(BaseModel):
    """Request body for storing a new secret.

    ``encryptedData`` is opaque client ciphertext. It is usually a string;
    a JSON object or array is accepted and stored as compact JSON text.
    """

    model_config = ConfigDict(populate_by_name=True)

    encrypted_data: str | dict[str, Any] | list[Any] | None = Field(
        default=None, alias="encryptedData"
    )

    @model_validator(mode="after")
    def _require_utf8(self) -> CreateSecretRequest:
        # JSON escapes can carry lone surrogates, which have no UTF-8 form.
        try:
            self.payload_text().encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError("encryptedData must be valid UTF-8 text") from exc
        return self

    def payload_text(self) -> str:
        """Return the payload as the text that will be stored ("" if missing)."""
        if self.encrypted_data is None:
            return ""
        if isinstance(self.encrypted_data, str):
            return self.encrypted_data
        return json.dumps(self.encrypted_data, separators=(",", ":"), ensure_ascii=False)


class CreateSecretResponse(BaseModel):
    """Id under which a new secret was stored."""

    id: str


class SecretResponse(BaseModel):
    """The stored ciphertext, returned once."""

    model_config = ConfigDict(populate_by_name=True)

    encrypted_data: str = Field(alias="encryptedData")


class ErrorResponse(BaseModel):
    error: str
