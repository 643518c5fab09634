"""System-specific response schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Overall service health and storage connectivity."""

    status: Literal["healthy", "degraded"]
    storage: Literal["connected", "disconnected"]
    backend: str
