import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, text
from sqlmodel import Column, Field, Index, SQLModel, String


class Session(SQLModel, table=True):
    """Represents a refresh-token session within the Authentication Bounded Context.

    One row exists per issued refresh token. Only the token's digest is stored;
    the raw token is handed to the client once and can never be read back.

    Invariants:
        - `is_revoked` is true exactly when `revoked_at` is set.
        - A session past `expires_at` is invalid even while `is_revoked` is
          still false; callers must check `is_active(now)`, not the flag alone.

    Attributes:
        id: The unique identifier for the session record.
        user_id: Foreign key linking the session to the `User` aggregate root.
        refresh_token_hash: Digest of the current refresh token (unique).
        expires_at: When the refresh token stops being accepted.
        revoked_at: When the session was revoked. Null while active.
        is_revoked: Revocation flag, kept in step with `revoked_at`.
        ip_address: Client address at creation time.
        user_agent: Client user agent at creation time.
        device_name: Optional client-supplied device label.
        created_at: When the session was created.
    """

    __tablename__ = "sessions"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        description="The unique identifier for the session record.",
    )
    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True,
        nullable=False,
        description="Foreign key linking the session to the User.",
    )
    refresh_token_hash: str = Field(
        sa_column=Column(String(128), unique=True, nullable=False),
        description="Digest of the refresh token; never the raw value.",
    )
    expires_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="The timestamp when the refresh token expires.",
    )
    revoked_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
        description="Timestamp of when the session was revoked. Null if active.",
    )
    is_revoked: bool = Field(default=False, nullable=False)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    device_name: Optional[str] = Field(default=None, max_length=128)
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    )

    __table_args__ = (
        Index("ix_sessions_user_id_expires_at", "user_id", "expires_at"),
        {"extend_existing": True},
    )

    def is_active(self, now: datetime) -> bool:
        return not self.is_revoked and self.expires_at > now

    def revoke(self, now: datetime) -> None:
        self.is_revoked = True
        self.revoked_at = now

    def rotate(self, refresh_token_hash: str, expires_at: datetime) -> None:
        """Replaces the token digest in place; the previous token stops working at once."""
        self.refresh_token_hash = refresh_token_hash
        self.expires_at = expires_at
        self.is_revoked = False
        self.revoked_at = None
