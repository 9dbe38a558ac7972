"""API router aggregator."""
from fastapi import APIRouter

from pixelboard.api.routes import admin, auth, health, requests

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(requests.router)
api_router.include_router(admin.router)
api_router.include_router(health.router)

__all__ = ["api_router"]
