"""Interfaces for the collaborators injected into the domain services.

Each one is small enough to be replaced by a fake in tests. None of the
implementations read settings on their own; keys and endpoints are passed in
when they are constructed.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from authlink.domain.value_objects.external_link import (
    ExternalOAuthToken,
    ExternalOAuthUserProfile,
    LinkStateClaims,
)
from authlink.domain.value_objects.external_provider import ExternalProvider


class IPasswordHasher(ABC):
    @abstractmethod
    def hash_password(self, password: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def verify_password(self, password: str, password_hash: str) -> bool:
        """Returns False for a wrong password or an unreadable hash; never raises."""
        raise NotImplementedError


class IClock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Returns the current time as a timezone-aware UTC datetime."""
        raise NotImplementedError


class IRefreshTokenHasher(ABC):
    @abstractmethod
    def hash(self, refresh_token: str) -> str:
        """Returns a deterministic digest of a raw refresh token."""
        raise NotImplementedError


class ITokenProtector(ABC):
    """Symmetric, purpose-scoped encryption for provider tokens at rest."""

    @abstractmethod
    def protect(self, plaintext: str) -> str:
        raise NotImplementedError

    @abstractmethod
    def unprotect(self, ciphertext: str) -> str:
        raise NotImplementedError


class IExternalLinkStateSigner(ABC):
    """Issues and validates the signed `state` parameter of the OAuth link flow."""

    @abstractmethod
    def create_state(self, user_id: uuid.UUID, provider: ExternalProvider) -> str:
        raise NotImplementedError

    @abstractmethod
    def validate_state(self, state: str) -> LinkStateClaims:
        """Returns the bound user and provider.

        Raises:
            LinkStateError: With the reason the state was rejected.
        """
        raise NotImplementedError


class IExternalOAuthClient(ABC):
    """An OAuth2 authorization-code client for a single provider."""

    @property
    @abstractmethod
    def provider(self) -> ExternalProvider:
        raise NotImplementedError

    @property
    @abstractmethod
    def default_scopes(self) -> tuple:
        raise NotImplementedError

    @abstractmethod
    def build_authorization_url(self, state: str) -> str:
        raise NotImplementedError

    @abstractmethod
    async def exchange_code(self, code: str) -> ExternalOAuthToken:
        raise NotImplementedError

    @abstractmethod
    async def refresh_access_token(self, refresh_token: str) -> ExternalOAuthToken:
        raise NotImplementedError

    @abstractmethod
    async def get_user_profile(self, access_token: str) -> Optional[ExternalOAuthUserProfile]:
        raise NotImplementedError
