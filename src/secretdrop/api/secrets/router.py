"""One-time secrets endpoints.

``POST`` stores client ciphertext under a fresh id. ``GET`` returns it once
and deletes it, unless the request was flagged as an automated scanner, in
which case the secret stays consumable. Error bodies are
``{"error": <message>}`` and never carry internal details.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from secretdrop.api.deps import get_scanner_flag, get_secret_service
from secretdrop.errors import (
    GeneratorFault,
    SecretNotFoundError,
    StorageFault,
    ValidationError,
)
from secretdrop.schemas.secret import (
    CreateSecretRequest,
    CreateSecretResponse,
    ErrorResponse,
    SecretResponse,
)
from secretdrop.services.secret_service import SecretService

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------------------------------------------------------
# Client-facing error messages
# ---------------------------------------------------------------------------

MISSING_DATA = "Encrypted data is required"
CREATE_FAILED = "Failed to create secret"
NOT_FOUND = "Secret not found or already viewed"
RETRIEVE_FAILED = "Failed to retrieve secret"


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "",
    status_code=201,
    response_model=CreateSecretResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def create_secret(
    body: CreateSecretRequest,
    service: SecretService = Depends(get_secret_service),
) -> CreateSecretResponse:
    """Store an encrypted secret and return its one-time id."""
    try:
        secret_id = await service.create_secret(body.payload_text())
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc) or MISSING_DATA) from exc
    except (StorageFault, GeneratorFault) as exc:
        logger.exception("Error creating secret")
        raise HTTPException(status_code=500, detail=CREATE_FAILED) from exc

    return CreateSecretResponse(id=secret_id)


@router.get(
    "/{secret_id}",
    response_model=SecretResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_secret(
    secret_id: str,
    service: SecretService = Depends(get_secret_service),
    is_scanner: bool = Depends(get_scanner_flag),
) -> SecretResponse:
    """Return a secret's ciphertext and delete it.

    Scanner-flagged requests receive the same response but leave the
    secret in place for the real recipient.
    """
    try:
        encrypted_data = await service.reveal_secret(secret_id, preserve=is_scanner)
    except SecretNotFoundError as exc:
        logger.debug("Secret %s not found", secret_id)
        raise HTTPException(status_code=404, detail=NOT_FOUND) from exc
    except StorageFault as exc:
        logger.exception("Error retrieving secret %s", secret_id)
        raise HTTPException(status_code=500, detail=RETRIEVE_FAILED) from exc

    return SecretResponse(encrypted_data=encrypted_data)
