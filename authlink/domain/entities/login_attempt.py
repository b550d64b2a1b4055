import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Column, Field, Index, SQLModel


class LoginAttempt(SQLModel, table=True):
    """Immutable audit record of a single authentication attempt.

    Rows are only ever inserted. `user_id` is null when the identifier did not
    resolve to an account; `failure_reason` holds the internal cause that the
    user-facing error deliberately hides.
    """

    __tablename__ = "login_attempts"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id", nullable=True)
    identifier: Optional[str] = Field(default=None, max_length=256)
    ip_address: Optional[str] = Field(default=None, max_length=64)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    is_successful: bool = Field(nullable=False)
    failure_reason: Optional[str] = Field(default=None, max_length=256)
    attempted_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))

    __table_args__ = (
        Index("ix_login_attempts_user_id_attempted_at", "user_id", "attempted_at"),
        {"extend_existing": True},
    )
