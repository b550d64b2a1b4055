"""Explicit management of refresh-token sessions.

Login and refresh create and rotate sessions on their own; this service covers
the rest of the lifecycle: creating a session from an externally minted token,
listing a user's sessions, and revoking them one at a time or by token (logout).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from structlog import get_logger

from authlink.core.exceptions import (
    DuplicateSessionError,
    InvalidRefreshTokenError,
    SessionNotFoundError,
    ValidationError,
)
from authlink.domain.entities.session import Session
from authlink.domain.interfaces.repositories import ISessionRepository, IUserRepository
from authlink.domain.interfaces.services import IClock, IRefreshTokenHasher

logger = get_logger(__name__)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class SessionService:
    def __init__(
        self,
        session_repository: ISessionRepository,
        user_repository: IUserRepository,
        refresh_token_hasher: IRefreshTokenHasher,
        clock: IClock,
    ):
        self.session_repository = session_repository
        self.user_repository = user_repository
        self.refresh_token_hasher = refresh_token_hasher
        self.clock = clock

    async def create_session(
        self,
        user_id: uuid.UUID,
        refresh_token: str,
        expires_at: datetime,
        revoked_at: Optional[datetime] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        device_name: Optional[str] = None,
    ) -> Session:
        """Stores a session for an existing user.

        Only the digest of `refresh_token` is persisted. A session created with
        `revoked_at` set starts out revoked.

        Raises:
            ValidationError: If the user does not exist or the token is blank.
            DuplicateSessionError: If the token is already in use.
        """
        if not refresh_token or not refresh_token.strip():
            raise ValidationError("Refresh token is required.")
        if await self.user_repository.get_by_id(user_id) is None:
            raise ValidationError("User does not exist.")

        token_hash = self.refresh_token_hasher.hash(refresh_token.strip())
        if await self.session_repository.get_by_token_hash(token_hash) is not None:
            raise DuplicateSessionError()

        session = Session(
            user_id=user_id,
            refresh_token_hash=token_hash,
            expires_at=expires_at,
            revoked_at=revoked_at,
            is_revoked=revoked_at is not None,
            ip_address=_clean(ip_address),
            user_agent=_clean(user_agent),
            device_name=_clean(device_name),
        )
        session = await self.session_repository.add(session)
        logger.info("session_created", user_id=str(user_id), session_id=str(session.id))
        return session

    async def list_sessions(self, user_id: uuid.UUID) -> List[Session]:
        return await self.session_repository.list_by_user(user_id)

    async def revoke_session(self, user_id: uuid.UUID, session_id: uuid.UUID) -> None:
        """Revokes one of the caller's sessions.

        Sessions owned by someone else are reported as missing.
        """
        session = await self.session_repository.get_by_id(session_id)
        if session is None or session.user_id != user_id:
            raise SessionNotFoundError()
        if session.is_revoked:
            return
        session.revoke(self.clock.now())
        await self.session_repository.update(session)
        logger.info("session_revoked", user_id=str(user_id), session_id=str(session_id))

    async def revoke_by_refresh_token(self, refresh_token: str) -> None:
        """Logs out the session that owns `refresh_token`. Revoking twice is a no-op."""
        if not refresh_token or not refresh_token.strip():
            raise InvalidRefreshTokenError()
        session = await self.session_repository.get_by_token_hash(
            self.refresh_token_hasher.hash(refresh_token.strip())
        )
        if session is None:
            raise InvalidRefreshTokenError()
        if session.is_revoked:
            return
        session.revoke(self.clock.now())
        await self.session_repository.update(session)
        logger.info("session_logged_out", user_id=str(session.user_id), session_id=str(session.id))
