"""External Link API Request and Response Schemas

Pydantic schemas for the external account linking endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from authlink.domain.value_objects.external_link import ExternalLinkStart, ExternalLinkView


class ExternalLinkStartResponse(BaseModel):
    """Where to send the user's browser, and the state the provider will echo back."""

    authorization_url: str
    state: str
    provider: str

    @classmethod
    def from_start(cls, start: ExternalLinkStart) -> "ExternalLinkStartResponse":
        return cls(authorization_url=start.authorization_url, state=start.state, provider=start.provider)


class ExternalLinkCompleteRequest(BaseModel):
    """Request schema for the provider callback."""

    code: str = Field(..., description="Authorization code returned by the provider", max_length=2048)
    state: str = Field(..., description="State token issued by the start endpoint", max_length=2048)


class ExternalLinkResponse(BaseModel):
    provider: str
    subject_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    linked_at: datetime

    @classmethod
    def from_view(cls, view: ExternalLinkView) -> "ExternalLinkResponse":
        return cls(
            provider=view.provider,
            subject_id=view.subject_id,
            email=view.email,
            display_name=view.display_name,
            linked_at=view.linked_at,
        )
