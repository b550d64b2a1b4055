from sqlalchemy.ext.asyncio import AsyncSession

from authlink.domain.entities.login_attempt import LoginAttempt
from authlink.domain.interfaces.repositories import ILoginAttemptRepository


class LoginAttemptRepository(ILoginAttemptRepository):
    """Append-only store for login attempts."""

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def add(self, attempt: LoginAttempt) -> None:
        self.db_session.add(attempt)
        await self.db_session.commit()
