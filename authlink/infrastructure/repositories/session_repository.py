import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from authlink.core.exceptions import DuplicateSessionError
from authlink.domain.entities.session import Session
from authlink.domain.interfaces.repositories import ISessionRepository

logger = get_logger(__name__)


class SessionRepository(ISessionRepository):
    """SQLAlchemy implementation of `ISessionRepository`.

    Rotation is a single conditional `UPDATE` keyed on the current token hash;
    of two requests presenting the same refresh token only the first matches a
    row. The unique index on `refresh_token_hash` backs up the rest.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_by_id(self, session_id: uuid.UUID) -> Optional[Session]:
        result = await self.db_session.execute(select(Session).where(Session.id == session_id))
        return result.scalars().first()

    async def get_by_token_hash(self, refresh_token_hash: str) -> Optional[Session]:
        result = await self.db_session.execute(
            select(Session).where(Session.refresh_token_hash == refresh_token_hash)
        )
        return result.scalars().first()

    async def list_by_user(self, user_id: uuid.UUID) -> List[Session]:
        result = await self.db_session.execute(
            select(Session).where(Session.user_id == user_id).order_by(Session.expires_at.desc())
        )
        return list(result.scalars().all())

    async def add(self, session: Session) -> Session:
        await self._commit(session)
        await self.db_session.refresh(session)
        return session

    async def update(self, session: Session) -> Session:
        await self._commit(session)
        return session

    async def rotate(
        self,
        session_id: uuid.UUID,
        current_hash: str,
        new_hash: str,
        expires_at: datetime,
    ) -> bool:
        statement = (
            update(Session)
            .where(
                Session.id == session_id,
                Session.refresh_token_hash == current_hash,
                Session.is_revoked.is_(False),
            )
            .values(refresh_token_hash=new_hash, expires_at=expires_at, revoked_at=None, is_revoked=False)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.db_session.execute(statement)
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warning("session_token_hash_conflict", session_id=str(session_id))
            raise DuplicateSessionError() from e

        if result.rowcount != 1:
            logger.warning("session_rotation_rejected", session_id=str(session_id))
            return False
        return True

    async def _commit(self, session: Session) -> None:
        self.db_session.add(session)
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warning("session_token_hash_conflict", session_id=str(session.id))
            raise DuplicateSessionError() from e
