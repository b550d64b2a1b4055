import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, String, Text
from sqlmodel import Column, Field, Index, SQLModel


class ExternalToken(SQLModel, table=True):
    """Provider tokens held on behalf of a user, encrypted at rest.

    `access_token` and `refresh_token` only ever contain ciphertext produced by
    the token protector. `scopes` is the space-separated scope string granted
    by the provider.
    """

    __tablename__ = "external_tokens"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    provider: str = Field(sa_column=Column(String(64), nullable=False))
    access_token: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Encrypted provider access token.",
    )
    refresh_token: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Encrypted provider refresh token.",
    )
    expires_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))
    scopes: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    updated_at: datetime = Field(sa_column=Column(DateTime(timezone=True), nullable=False))

    __table_args__ = (
        Index("ix_external_tokens_user_id_provider", "user_id", "provider", unique=True),
        {"extend_existing": True},
    )

    @property
    def scope_list(self) -> List[str]:
        return self.scopes.split() if self.scopes else []
