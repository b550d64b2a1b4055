import uuid
from typing import Optional

from structlog import get_logger

from authlink.core.logging import mask_identifier
from authlink.domain.entities.login_attempt import LoginAttempt
from authlink.domain.interfaces.repositories import ILoginAttemptRepository
from authlink.domain.interfaces.services import IClock

logger = get_logger(__name__)


class LoginAttemptRecorder:
    """Appends one audit row per authentication attempt.

    The failure reason stored here is the only place the real cause of a
    failed login is kept; callers only ever see the generic message.
    """

    def __init__(self, repository: ILoginAttemptRepository, clock: IClock):
        self.repository = repository
        self.clock = clock

    async def record(
        self,
        identifier: str,
        is_successful: bool,
        user_id: Optional[uuid.UUID] = None,
        failure_reason: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> LoginAttempt:
        attempt = LoginAttempt(
            user_id=user_id,
            identifier=identifier,
            ip_address=ip_address,
            user_agent=user_agent,
            is_successful=is_successful,
            failure_reason=failure_reason,
            attempted_at=self.clock.now(),
        )
        await self.repository.add(attempt)
        logger.info(
            "login_attempt_recorded",
            identifier=mask_identifier(identifier),
            success=is_successful,
            reason=failure_reason,
        )
        return attempt
