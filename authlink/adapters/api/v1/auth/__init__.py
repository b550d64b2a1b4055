from __future__ import annotations

"""Authentication router package – bundles login, registration and token endpoints."""

from fastapi import APIRouter

from .routes import login as login_route
from .routes import logout as logout_route
from .routes import refresh as refresh_route
from .routes import register as register_route
from .routes import reset_password as reset_password_route

router = APIRouter(prefix="/auth", tags=["auth"])

# Delegate to sub-routers ----------------------------------------------------

router.include_router(login_route.router, prefix="/login")
router.include_router(register_route.router, prefix="/register")
router.include_router(reset_password_route.router, prefix="/reset-password")
router.include_router(refresh_route.router, prefix="/refresh")
router.include_router(logout_route.router, prefix="/logout")

__all__ = ["router"]
