"""Session API response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from authlink.domain.entities.session import Session


class SessionResponse(BaseModel):
    """A refresh-token session. The token digest is never exposed."""

    id: uuid.UUID
    device_name: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[datetime] = None
    expires_at: datetime
    revoked_at: Optional[datetime] = None
    is_revoked: bool

    @classmethod
    def from_entity(cls, session: Session) -> "SessionResponse":
        return cls(
            id=session.id,
            device_name=session.device_name,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            created_at=session.created_at,
            expires_at=session.expires_at,
            revoked_at=session.revoked_at,
            is_revoked=session.is_revoked,
        )
