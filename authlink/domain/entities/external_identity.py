import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlmodel import Column, Field, Index, SQLModel


class ExternalIdentity(SQLModel, table=True):
    """Represents a link between a User and an account at an external provider.

    Part of the Authentication Bounded Context. A user may link at most one
    account per provider, and a provider account may be linked to at most one
    user. Both rules are enforced by unique indexes, so concurrent completions
    of the same flow cannot both succeed.

    Attributes:
        id: The unique identifier for the identity record.
        user_id: Foreign key linking the identity to the `User` aggregate root.
        provider: Normalized provider name (e.g., "google").
        subject_id: The provider's stable identifier for the account.
        email: The email the provider reported, if any.
        display_name: The name the provider reported, if any.
        linked_at: When the link was first established.
    """

    __tablename__ = "external_identities"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    provider: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Normalized provider name.",
    )
    subject_id: str = Field(
        sa_column=Column(String(256), nullable=False),
        description="The unique identifier for the account at the provider.",
    )
    email: Optional[str] = Field(default=None, max_length=256)
    display_name: Optional[str] = Field(default=None, max_length=256)
    linked_at: datetime = Field(
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="The timestamp when the account was linked.",
    )

    __table_args__ = (
        Index("ix_external_identities_user_id_provider", "user_id", "provider", unique=True),
        Index("ix_external_identities_provider_subject_id", "provider", "subject_id", unique=True),
        {"extend_existing": True},
    )
