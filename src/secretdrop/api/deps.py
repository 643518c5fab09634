"""Shared FastAPI dependencies for the secret service and scanner flag."""

from fastapi import Request

from secretdrop.services.secret_service import SecretService


async def get_secret_service(request: Request) -> SecretService:
    """Return the SecretService instance stored on app state.

    The service and its storage backend are created during the application
    lifespan and stored on ``request.app.state.secret_service``.
    """
    return request.app.state.secret_service


async def get_scanner_flag(request: Request) -> bool:
    """Return whether the scanner middleware flagged this request.

    Requests that never passed through the middleware count as human.
    """
    return bool(getattr(request.state, "is_automated_scanner", False))
