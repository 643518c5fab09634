"""FastAPI application factory with async lifespan for the storage backend."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from secretdrop import __version__
from secretdrop.api.router import api_router
from secretdrop.config import Settings, get_settings
from secretdrop.middleware.scanner import ScannerDetector
from secretdrop.services.secret_service import SecretService
from secretdrop.storage import create_backend

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application startup and shutdown lifecycle.

    On startup: create and initialize the configured storage backend and
    wrap it in the SecretService. On shutdown: close the backend.
    """
    settings: Settings = app.state.settings

    backend = await create_backend(settings)
    app.state.secret_service = SecretService(
        backend,
        id_bytes=settings.id_bytes,
        consume_mode=settings.consume_mode,
    )
    logger.info(
        "secretdrop started (backend=%s, consume_mode=%s)",
        backend.name,
        settings.consume_mode,
    )

    yield

    await backend.close()
    logger.info("secretdrop stopped")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTP errors as ``{"error": <message>}``."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject malformed bodies with 400 instead of FastAPI's default 422."""
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render unexpected exceptions as a generic 500 without internal details."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the app factory. Uvicorn calls it with the --factory flag:
        uvicorn secretdrop.app:create_app --factory
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(
        title="secretdrop",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )
    app.state.settings = settings

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    if settings.scanner_detection:
        app.middleware("http")(ScannerDetector(settings.scanner_patterns))

    app.include_router(api_router, prefix="/api")

    # Static front-end mounted last so it never shadows the API routes.
    if settings.static_dir is not None:
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app
