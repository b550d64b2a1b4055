"""Session management endpoints for the authenticated user."""

from .routes import router

__all__ = ["router"]
