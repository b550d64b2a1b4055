from __future__ import annotations

"""Authentication API schemas package.

Request and response models are kept in separate modules and re-exported here
so routes can import from ``authlink.adapters.api.v1.auth.schemas``.
"""

# flake8: noqa: F401 – re-export

from .requests import (
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UsernameStr,
)
from .responses import MessageResponse, RegisterResponse, TokenResponse

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "RefreshTokenRequest",
    "UsernameStr",
    "TokenResponse",
    "RegisterResponse",
    "MessageResponse",
]
