"""Pydantic schemas for API request/response models."""

from secretdrop.schemas.secret import (
    CreateSecretRequest,
    CreateSecretResponse,
    ErrorResponse,
    SecretResponse,
)
from secretdrop.schemas.system import HealthResponse
