"""Repository interfaces for abstracting data persistence in the domain layer.

This module defines the abstract base classes (interfaces) for repositories,
which act as a "port" in the context of Hexagonal Architecture. The domain layer
uses these interfaces to interact with persistence without being coupled to a
specific technology.

Implementations translate storage uniqueness violations into the domain error
named on each write method, so services never see driver exceptions.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from authlink.domain.entities.external_identity import ExternalIdentity
from authlink.domain.entities.external_token import ExternalToken
from authlink.domain.entities.login_attempt import LoginAttempt
from authlink.domain.entities.session import Session
from authlink.domain.entities.user import User
from authlink.domain.value_objects.tokens import AccessGrants


class IUserRepository(ABC):
    """An interface defining the contract for user persistence operations.

    This repository manages the lifecycle of the `User` aggregate root. Lookups
    by username or email take the *normalized* form of the identifier.
    """

    @abstractmethod
    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Retrieves a user by their unique identifier.

        Args:
            user_id: The UUID of the user.

        Returns:
            An optional `User` entity. Returns `None` if no user is found.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_by_normalized_username(self, normalized_username: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def get_by_normalized_email(self, normalized_email: str) -> Optional[User]:
        raise NotImplementedError

    @abstractmethod
    async def add(self, user: User) -> User:
        """Persists a new user.

        Raises:
            DuplicateUserError: If the normalized username or email is taken.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, user: User) -> User:
        raise NotImplementedError

    @abstractmethod
    async def get_access_grants(self, user_id: uuid.UUID) -> AccessGrants:
        """Loads the roles of a user, direct and group-derived, with their permissions."""
        raise NotImplementedError


class ISessionRepository(ABC):
    """An interface for refresh-token session persistence."""

    @abstractmethod
    async def get_by_id(self, session_id: uuid.UUID) -> Optional[Session]:
        raise NotImplementedError

    @abstractmethod
    async def get_by_token_hash(self, refresh_token_hash: str) -> Optional[Session]:
        raise NotImplementedError

    @abstractmethod
    async def list_by_user(self, user_id: uuid.UUID) -> List[Session]:
        raise NotImplementedError

    @abstractmethod
    async def add(self, session: Session) -> Session:
        """Persists a new session.

        Raises:
            DuplicateSessionError: If the token hash already exists.
        """
        raise NotImplementedError

    @abstractmethod
    async def update(self, session: Session) -> Session:
        """Persists changes to an existing session.

        Raises:
            DuplicateSessionError: If the token hash collides with another session.
        """
        raise NotImplementedError

    @abstractmethod
    async def rotate(
        self,
        session_id: uuid.UUID,
        current_hash: str,
        new_hash: str,
        expires_at: datetime,
    ) -> bool:
        """Swaps `current_hash` for `new_hash` only if the stored session still has it.

        The check and the write are one conditional statement, so of two callers
        rotating the same token only one succeeds.

        Returns:
            bool: False if the session is gone, revoked, or no longer carries
                `current_hash`.

        Raises:
            DuplicateSessionError: If `new_hash` collides with another session.
        """
        raise NotImplementedError


class ILoginAttemptRepository(ABC):
    @abstractmethod
    async def add(self, attempt: LoginAttempt) -> None:
        raise NotImplementedError


class IExternalLinkRepository(ABC):
    """Persistence for external identities and the provider tokens that go with them.

    An identity and its token are always written and removed together, in a
    single transaction.
    """

    @abstractmethod
    async def get_identity(self, user_id: uuid.UUID, provider: str) -> Optional[ExternalIdentity]:
        raise NotImplementedError

    @abstractmethod
    async def get_identity_by_subject(self, provider: str, subject_id: str) -> Optional[ExternalIdentity]:
        raise NotImplementedError

    @abstractmethod
    async def list_identities(self, user_id: uuid.UUID, provider: Optional[str] = None) -> List[ExternalIdentity]:
        raise NotImplementedError

    @abstractmethod
    async def get_token(self, user_id: uuid.UUID, provider: str) -> Optional[ExternalToken]:
        raise NotImplementedError

    @abstractmethod
    async def save_link(self, identity: ExternalIdentity, token: ExternalToken) -> None:
        """Inserts or updates an identity and its token atomically.

        Raises:
            ExternalAccountConflictError: If a uniqueness constraint on the
                identity or token tables is violated.
        """
        raise NotImplementedError

    @abstractmethod
    async def save_token(self, token: ExternalToken) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete_link(self, identity: Optional[ExternalIdentity], token: Optional[ExternalToken]) -> None:
        """Removes whichever of the identity and token rows are given."""
        raise NotImplementedError
