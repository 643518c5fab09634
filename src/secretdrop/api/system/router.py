"""System router providing health check endpoints."""

import logging

from fastapi import APIRouter, Request

from secretdrop.schemas.system import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Return service health including storage backend connectivity.

    Reports ``healthy`` when the backend answers its ping and ``degraded``
    otherwise. Always responds 200 so the body can be inspected.
    """
    backend = request.app.state.secret_service.backend

    storage_ok = False
    try:
        storage_ok = await backend.ping()
    except Exception:
        logger.warning("Storage health check failed", exc_info=True)

    return HealthResponse(
        status="healthy" if storage_ok else "degraded",
        storage="connected" if storage_ok else "disconnected",
        backend=backend.name,
    )
