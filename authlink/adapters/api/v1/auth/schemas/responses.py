from __future__ import annotations

"""Response Pydantic models for authentication endpoints."""

import uuid
from datetime import datetime

from pydantic import BaseModel

from authlink.domain.value_objects.tokens import AuthTokens


class TokenResponse(BaseModel):
    """Access and refresh tokens with their expiry instants."""

    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime
    token_type: str = "bearer"

    @classmethod
    def from_tokens(cls, tokens: AuthTokens) -> "TokenResponse":
        return cls(
            access_token=tokens.access_token,
            access_token_expires_at=tokens.access_token_expires_at,
            refresh_token=tokens.refresh_token,
            refresh_token_expires_at=tokens.refresh_token_expires_at,
            token_type=tokens.token_type,
        )


class RegisterResponse(BaseModel):
    user_id: uuid.UUID


class MessageResponse(BaseModel):
    """Generic single-message response used by endpoints with no payload."""

    message: str
