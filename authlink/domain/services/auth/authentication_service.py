"""Credential authentication, registration, password reset and token refresh.

`AuthenticationService` owns the local-account half of authlink. Everything it
needs is injected: repositories, the password and refresh-token hashers, the
JWT issuer and a clock. It never reads settings on its own.

Security notes:
    - Login failures are indistinguishable to the caller. Unknown identifier,
      locked account, wrong password and broken JWT configuration all raise
      the same `InvalidCredentialsError`; the real cause goes to the
      login-attempt audit log only.
    - Refresh tokens are 64 bytes from `secrets`. Only their SHA-256 digest is
      stored, and every refresh rotates the token in place, so a token can be
      used exactly once.
"""

import base64
import secrets
import uuid
from datetime import timedelta
from typing import Optional

from structlog import get_logger

from authlink.core.exceptions import (
    DuplicateSessionError,
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    PasswordResetError,
    TokenConfigurationError,
    ValidationError,
)
from authlink.core.logging import mask_identifier
from authlink.domain.entities.session import Session
from authlink.domain.entities.user import User, normalize_identifier
from authlink.domain.interfaces.repositories import ISessionRepository, IUserRepository
from authlink.domain.interfaces.services import IClock, IPasswordHasher, IRefreshTokenHasher
from authlink.domain.services.auth.jwt_issuer import JwtTokenIssuer
from authlink.domain.services.auth.login_attempts import LoginAttemptRecorder
from authlink.domain.value_objects.tokens import AuthTokens

logger = get_logger(__name__)

DEFAULT_REFRESH_TOKEN_DAYS = 30
REFRESH_TOKEN_BYTES = 64

USER_NOT_FOUND_OR_LOCKED = "User not found or locked."
INVALID_PASSWORD = "Invalid password."
JWT_CONFIGURATION_MISSING = "JWT configuration is missing."


def generate_refresh_token() -> str:
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


class AuthenticationService:
    """Service for username/password authentication and refresh-token sessions.

    Attributes:
        user_repository (IUserRepository): User persistence.
        session_repository (ISessionRepository): Refresh-token sessions.
        login_attempts (LoginAttemptRecorder): Audit log of login attempts.
        password_hasher (IPasswordHasher): Hashes and verifies passwords.
        refresh_token_hasher (IRefreshTokenHasher): Digests refresh tokens.
        token_issuer (JwtTokenIssuer): Issues access tokens.
        clock (IClock): Source of the current time.
        refresh_token_lifetime (timedelta): How long a refresh token stays valid.
    """

    def __init__(
        self,
        user_repository: IUserRepository,
        session_repository: ISessionRepository,
        login_attempts: LoginAttemptRecorder,
        password_hasher: IPasswordHasher,
        refresh_token_hasher: IRefreshTokenHasher,
        token_issuer: JwtTokenIssuer,
        clock: IClock,
        refresh_token_expiry_days: int = DEFAULT_REFRESH_TOKEN_DAYS,
    ):
        self.user_repository = user_repository
        self.session_repository = session_repository
        self.login_attempts = login_attempts
        self.password_hasher = password_hasher
        self.refresh_token_hasher = refresh_token_hasher
        self.token_issuer = token_issuer
        self.clock = clock
        days = refresh_token_expiry_days if refresh_token_expiry_days > 0 else DEFAULT_REFRESH_TOKEN_DAYS
        self.refresh_token_lifetime = timedelta(days=days)

    async def login(
        self,
        identifier: str,
        password: str,
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        device_name: Optional[str] = None,
    ) -> AuthTokens:
        """Authenticates a user by username or email and opens a refresh session.

        Args:
            identifier: Username or email, matched case-insensitively.
            password: The plain-text password.
            ip_address: Client address, recorded on the attempt and session.
            user_agent: Client user agent, recorded on the attempt and session.
            device_name: Optional device label stored on the session.

        Returns:
            AuthTokens: A fresh access token and refresh token.

        Raises:
            InvalidCredentialsError: For every kind of failure.
        """
        if not identifier or not identifier.strip() or not password:
            raise InvalidCredentialsError()

        identifier = identifier.strip()
        normalized = normalize_identifier(identifier)
        user = await self.user_repository.get_by_normalized_username(normalized)
        if user is None:
            user = await self.user_repository.get_by_normalized_email(normalized)

        if user is None or not user.is_active:
            await self.login_attempts.record(
                identifier,
                False,
                failure_reason=USER_NOT_FOUND_OR_LOCKED,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            raise InvalidCredentialsError()

        if not user.password_hash or not self.password_hasher.verify_password(password, user.password_hash):
            user.register_failed_access()
            await self.user_repository.update(user)
            await self.login_attempts.record(
                identifier,
                False,
                user_id=user.id,
                failure_reason=INVALID_PASSWORD,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            raise InvalidCredentialsError()

        user.reset_failed_access()
        await self.user_repository.update(user)

        grants = await self.user_repository.get_access_grants(user.id)
        try:
            access_token = self.token_issuer.issue(user, grants)
        except TokenConfigurationError:
            logger.error("jwt_configuration_missing", user_id=str(user.id))
            await self.login_attempts.record(
                identifier,
                False,
                user_id=user.id,
                failure_reason=JWT_CONFIGURATION_MISSING,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            raise InvalidCredentialsError()

        refresh_token = generate_refresh_token()
        session = Session(
            user_id=user.id,
            refresh_token_hash=self.refresh_token_hasher.hash(refresh_token),
            expires_at=self.clock.now() + self.refresh_token_lifetime,
            ip_address=ip_address,
            user_agent=user_agent,
            device_name=device_name,
        )
        await self.session_repository.add(session)
        await self.login_attempts.record(
            identifier, True, user_id=user.id, ip_address=ip_address, user_agent=user_agent
        )

        logger.info("user_logged_in", user_id=str(user.id), session_id=str(session.id))
        return AuthTokens(
            access_token=access_token.token,
            access_token_expires_at=access_token.expires_at,
            refresh_token=refresh_token,
            refresh_token_expires_at=session.expires_at,
        )

    async def refresh_token(self, refresh_token: str) -> AuthTokens:
        """Exchanges a refresh token for a new token pair, rotating the session.

        The session row is updated in place with the new digest, so the token
        passed in stops working immediately. Expired sessions, and sessions of
        users that are now deleted or locked, are revoked on the way out.

        Raises:
            InvalidRefreshTokenError: If the token is unknown, revoked, expired,
                belongs to an unavailable user, or lost a concurrent rotation.
        """
        if not refresh_token or not refresh_token.strip():
            raise InvalidRefreshTokenError()

        current_hash = self.refresh_token_hasher.hash(refresh_token.strip())
        session = await self.session_repository.get_by_token_hash(current_hash)
        if session is None or session.is_revoked:
            raise InvalidRefreshTokenError()

        now = self.clock.now()
        if session.expires_at <= now:
            session.revoke(now)
            await self.session_repository.update(session)
            logger.info("refresh_session_expired", session_id=str(session.id))
            raise InvalidRefreshTokenError()

        user = await self.user_repository.get_by_id(session.user_id)
        if user is None or not user.is_active:
            session.revoke(now)
            await self.session_repository.update(session)
            logger.warning("refresh_for_unavailable_user", session_id=str(session.id))
            raise InvalidRefreshTokenError()

        grants = await self.user_repository.get_access_grants(user.id)
        try:
            access_token = self.token_issuer.issue(user, grants)
        except TokenConfigurationError:
            logger.error("jwt_configuration_missing", user_id=str(user.id))
            raise InvalidRefreshTokenError()

        new_refresh_token = generate_refresh_token()
        new_hash = self.refresh_token_hasher.hash(new_refresh_token)
        expires_at = now + self.refresh_token_lifetime
        try:
            rotated = await self.session_repository.rotate(session.id, current_hash, new_hash, expires_at)
        except DuplicateSessionError:
            raise InvalidRefreshTokenError()
        if not rotated:
            raise InvalidRefreshTokenError()
        session.rotate(new_hash, expires_at)

        logger.info("refresh_session_rotated", user_id=str(user.id), session_id=str(session.id))
        return AuthTokens(
            access_token=access_token.token,
            access_token_expires_at=access_token.expires_at,
            refresh_token=new_refresh_token,
            refresh_token_expires_at=session.expires_at,
        )

    async def register(self, username: str, email: str, password: str) -> uuid.UUID:
        """Registers a new local account.

        Returns:
            uuid.UUID: The id of the new user.

        Raises:
            ValidationError: If username, email or password is blank.
            DuplicateUserError: If the username or email is already taken,
                compared case-insensitively.
        """
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email:
            raise ValidationError("Username and email are required.")
        if not password:
            raise ValidationError("Password is required.")

        normalized_username = normalize_identifier(username)
        normalized_email = normalize_identifier(email)
        if (
            await self.user_repository.get_by_normalized_username(normalized_username) is not None
            or await self.user_repository.get_by_normalized_email(normalized_email) is not None
        ):
            raise DuplicateUserError()

        user = User(
            username=username,
            normalized_username=normalized_username,
            email=email,
            normalized_email=normalized_email,
            password_hash=self.password_hasher.hash_password(password),
        )
        user = await self.user_repository.add(user)
        logger.info("user_registered", user_id=str(user.id), username=mask_identifier(username))
        return user.id

    async def reset_password(self, email: str, reset_token: str, new_password: str) -> None:
        """Sets a new password using a previously issued reset token.

        A successful reset also unlocks the account and clears the failure
        counter. The reset token is cleared, so it cannot be used twice.

        Raises:
            ValidationError: If any argument is blank.
            PasswordResetError: If the user is unknown, or the token is wrong
                or expired.
        """
        email = (email or "").strip()
        if not email:
            raise ValidationError("Email is required.")
        if not reset_token:
            raise ValidationError("Reset token is required.")
        if not new_password:
            raise ValidationError("New password is required.")

        user = await self.user_repository.get_by_normalized_email(normalize_identifier(email))
        if user is None or user.is_deleted:
            raise PasswordResetError("User not found.")

        if not user.password_reset_token or not secrets.compare_digest(
            user.password_reset_token.encode("utf-8"), reset_token.encode("utf-8")
        ):
            logger.warning("password_reset_token_mismatch", user_id=str(user.id))
            raise PasswordResetError("Reset token is invalid.")

        expires_at = user.password_reset_token_expires_at
        if expires_at is not None and expires_at <= self.clock.now():
            raise PasswordResetError("Reset token has expired.")

        user.password_hash = self.password_hasher.hash_password(new_password)
        user.reset_failed_access()
        user.is_locked = False
        user.clear_password_reset()
        await self.user_repository.update(user)
        logger.info("password_reset_completed", user_id=str(user.id))
