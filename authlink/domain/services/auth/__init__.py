from .authentication_service import AuthenticationService
from .jwt_issuer import JwtTokenIssuer
from .login_attempts import LoginAttemptRecorder
from .session_service import SessionService

__all__ = [
    "AuthenticationService",
    "JwtTokenIssuer",
    "LoginAttemptRecorder",
    "SessionService",
]
