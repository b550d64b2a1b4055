"""Value objects exchanged by the external account linking flow.

`ExternalOAuthToken` and `ExternalOAuthUserProfile` are what an OAuth client
returns after talking to the provider. The remaining types are what the link
service hands back to its callers; none of them carries ciphertext.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from authlink.domain.value_objects.external_provider import ExternalProvider


@dataclass(frozen=True)
class ExternalOAuthToken:
    """Token response from a provider's token endpoint.

    Attributes:
        access_token: The provider access token. May be empty when the provider
            answered without one; the link service rejects that case.
        refresh_token: Only returned on first consent or with `prompt=consent`.
        expires_in: Lifetime of the access token in seconds.
        scope: Space-separated scopes granted, if the provider reported them.
        token_type: Usually "Bearer".
    """

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: int = 0
    scope: Optional[str] = None
    token_type: Optional[str] = None


@dataclass(frozen=True)
class ExternalOAuthUserProfile:
    subject_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None


@dataclass(frozen=True)
class LinkStateClaims:
    """Claims recovered from a validated link state."""

    user_id: uuid.UUID
    provider: ExternalProvider


@dataclass(frozen=True)
class ExternalLinkStart:
    authorization_url: str
    state: str
    provider: str


@dataclass(frozen=True)
class ExternalLinkView:
    """Public view of a linked external account."""

    provider: str
    subject_id: str
    email: Optional[str]
    display_name: Optional[str]
    linked_at: datetime


@dataclass(frozen=True)
class ExternalAccessToken:
    """A decrypted provider access token ready to be used against the provider API."""

    provider: str
    access_token: str
    expires_at: datetime
    scopes: Tuple[str, ...] = field(default_factory=tuple)
