"""API v1 router configuration.
"""

from fastapi import APIRouter

from .auth import router as auth_router
from .external import router as external_router
from .health import router as health_router
from .sessions import router as sessions_router

api_router = APIRouter()

api_router.include_router(health_router, prefix="/health", tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(external_router, prefix="/external", tags=["external"])
api_router.include_router(sessions_router, prefix="/sessions", tags=["sessions"])
