from __future__ import annotations

"""Request-payload Pydantic models for authentication endpoints."""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, constr

# ---------------------------------------------------------------------------
# Shared / primitive types ---------------------------------------------------
# ---------------------------------------------------------------------------

UsernameStr = constr(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")

# ---------------------------------------------------------------------------
# Concrete request models ----------------------------------------------------
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Payload expected by ``POST /auth/login``.

    ``identifier`` is matched against the username first, then the email.
    """

    identifier: str = Field(..., max_length=256, examples=["alice"])
    password: str = Field(..., max_length=256, examples=["Str0ngP@ssw0rd"])
    device_name: Optional[str] = Field(default=None, max_length=128, examples=["Alice's laptop"])


class RegisterRequest(BaseModel):
    """Payload expected by ``POST /auth/register``."""

    username: UsernameStr = Field(..., examples=["alice"])
    email: EmailStr = Field(..., examples=["alice@example.com"])
    password: str = Field(..., min_length=1, max_length=256, examples=["Str0ngP@ssw0rd"])


class ResetPasswordRequest(BaseModel):
    """Payload expected by ``POST /auth/reset-password``."""

    email: EmailStr = Field(..., examples=["alice@example.com"])
    reset_token: str = Field(..., min_length=1, description="Password reset token issued to the user")
    new_password: str = Field(..., min_length=1, max_length=256)


class RefreshTokenRequest(BaseModel):
    """Payload expected by ``POST /auth/refresh`` and ``POST /auth/logout``."""

    refresh_token: str = Field(..., min_length=1)
