from __future__ import annotations

"""Re-export factory functions for generating fake test data."""

# flake8: noqa: F401 – re-export

from .session import create_fake_session
from .user import create_fake_user

__all__ = [
    "create_fake_user",
    "create_fake_session",
]
