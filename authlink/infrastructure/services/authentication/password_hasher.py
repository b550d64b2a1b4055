"""Password hashing with passlib's bcrypt context."""

from passlib.context import CryptContext
from structlog import get_logger

from authlink.domain.interfaces.services import IPasswordHasher

logger = get_logger(__name__)


class PasslibPasswordHasher(IPasswordHasher):
    """bcrypt password hashing.

    Args:
        work_factor: bcrypt cost (log2 rounds). Tests use the minimum of 4.
    """

    def __init__(self, work_factor: int = 12):
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=work_factor)

    def hash_password(self, password: str) -> str:
        return self.pwd_context.hash(password)

    def verify_password(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        try:
            return self.pwd_context.verify(password, password_hash)
        except ValueError:
            # Unrecognized or corrupted hash.
            logger.warning("password_hash_unreadable")
            return False
