"""API router aggregating all sub-routers."""

from fastapi import APIRouter

from secretdrop.api.secrets.router import router as secrets_router
from secretdrop.api.system.router import router as system_router

api_router = APIRouter()
api_router.include_router(system_router, prefix="/system", tags=["system"])
api_router.include_router(secrets_router, prefix="/secrets", tags=["secrets"])
