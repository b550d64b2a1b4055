"""Persistence for external identities and provider tokens.

Both tables carry unique indexes on `(user_id, provider)`; identities are also
unique on `(provider, subject_id)`. Two completions racing for the same
provider account therefore cannot both commit. The loser's `IntegrityError` is
rolled back and reported as `ExternalAccountConflictError`.
"""

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from authlink.core.exceptions import ExternalAccountConflictError
from authlink.domain.entities.external_identity import ExternalIdentity
from authlink.domain.entities.external_token import ExternalToken
from authlink.domain.interfaces.repositories import IExternalLinkRepository

logger = get_logger(__name__)

CONFLICT_MESSAGE = "External account is already linked."


class ExternalLinkRepository(IExternalLinkRepository):
    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_identity(self, user_id: uuid.UUID, provider: str) -> Optional[ExternalIdentity]:
        result = await self.db_session.execute(
            select(ExternalIdentity).where(
                ExternalIdentity.user_id == user_id,
                ExternalIdentity.provider == provider,
            )
        )
        return result.scalars().first()

    async def get_identity_by_subject(self, provider: str, subject_id: str) -> Optional[ExternalIdentity]:
        result = await self.db_session.execute(
            select(ExternalIdentity).where(
                ExternalIdentity.provider == provider,
                ExternalIdentity.subject_id == subject_id,
            )
        )
        return result.scalars().first()

    async def list_identities(self, user_id: uuid.UUID, provider: Optional[str] = None) -> List[ExternalIdentity]:
        statement = select(ExternalIdentity).where(ExternalIdentity.user_id == user_id)
        if provider is not None:
            statement = statement.where(ExternalIdentity.provider == provider)
        result = await self.db_session.execute(statement.order_by(ExternalIdentity.provider))
        return list(result.scalars().all())

    async def get_token(self, user_id: uuid.UUID, provider: str) -> Optional[ExternalToken]:
        result = await self.db_session.execute(
            select(ExternalToken).where(
                ExternalToken.user_id == user_id,
                ExternalToken.provider == provider,
            )
        )
        return result.scalars().first()

    async def save_link(self, identity: ExternalIdentity, token: ExternalToken) -> None:
        self.db_session.add(identity)
        self.db_session.add(token)
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warning(
                "external_link_conflict",
                user_id=str(identity.user_id),
                provider=identity.provider,
            )
            raise ExternalAccountConflictError(CONFLICT_MESSAGE) from e

    async def save_token(self, token: ExternalToken) -> None:
        self.db_session.add(token)
        await self.db_session.commit()

    async def delete_link(self, identity: Optional[ExternalIdentity], token: Optional[ExternalToken]) -> None:
        if identity is not None:
            await self.db_session.delete(identity)
        if token is not None:
            await self.db_session.delete(token)
        await self.db_session.commit()
