"""Repository implementations for the infrastructure layer."""

from .external_link_repository import ExternalLinkRepository
from .login_attempt_repository import LoginAttemptRepository
from .session_repository import SessionRepository
from .user_repository import UserRepository

__all__ = [
    "ExternalLinkRepository",
    "LoginAttemptRepository",
    "SessionRepository",
    "UserRepository",
]
