"""External account linking endpoints."""

from .links import router

__all__ = ["router"]
