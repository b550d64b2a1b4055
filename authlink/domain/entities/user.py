import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, text
from sqlmodel import Column, Field, SQLModel, String


def normalize_identifier(value: str) -> str:
    """Returns the lookup form of a username or email: trimmed and upper-cased.

    Normalized columns are the only ones used for lookups and uniqueness, so
    every read and write path must go through this function.
    """
    return value.strip().upper()


class User(SQLModel, table=True):
    """Represents a User entity and acts as an Aggregate Root.

    The raw `username` and `email` are kept as entered; their normalized copies
    carry the unique indexes, which makes uniqueness case-insensitive and lets
    the database settle concurrent registrations.

    Attributes:
        id: The unique identifier for the user.
        username: The username as entered at registration.
        normalized_username: Upper-cased, trimmed username used for lookups.
        email: The email address as entered at registration.
        normalized_email: Upper-cased, trimmed email used for lookups.
        password_hash: The hashed password. Null for accounts without a password.
        access_failed_count: Consecutive failed password checks.
        is_locked: Locked accounts cannot authenticate or link providers.
        is_deleted: Soft-deletion flag.
        password_reset_token: Single-use token for a pending password reset.
        password_reset_token_expires_at: Optional expiry of the reset token.
        created_at: The timestamp of when the user account was created.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        description="The unique identifier for the user.",
    )
    username: str = Field(
        sa_column=Column(String(256), nullable=False),
        description="Username as entered.",
    )
    normalized_username: str = Field(
        sa_column=Column(String(256), unique=True, index=True, nullable=False),
        description="Normalized username used for lookup and uniqueness.",
    )
    email: str = Field(
        sa_column=Column(String(256), nullable=False),
        description="Email address as entered.",
    )
    normalized_email: str = Field(
        sa_column=Column(String(256), unique=True, index=True, nullable=False),
        description="Normalized email used for lookup and uniqueness.",
    )
    password_hash: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Hashed password. Null for accounts without a local password.",
    )
    access_failed_count: int = Field(default=0, nullable=False)
    is_locked: bool = Field(default=False, nullable=False)
    is_deleted: bool = Field(default=False, nullable=False)
    password_reset_token: Optional[str] = Field(default=None, max_length=256)
    password_reset_token_expires_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True),
    )
    created_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    )

    @property
    def is_active(self) -> bool:
        """Whether the account may authenticate or act on its own behalf."""
        return not self.is_deleted and not self.is_locked

    def register_failed_access(self) -> None:
        self.access_failed_count += 1

    def reset_failed_access(self) -> None:
        self.access_failed_count = 0

    def clear_password_reset(self) -> None:
        self.password_reset_token = None
        self.password_reset_token_expires_at = None
