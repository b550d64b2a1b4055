"""Dependency injection for the authentication and external-link services.

This module is the composition root: it is the only place that reads
`settings` and turns them into configured infrastructure objects, which are
then handed to the domain services through FastAPI `Depends`.

Route tests replace the service factories through
`app.dependency_overrides`, so nothing here is touched when a test runs
against in-memory fakes.
"""

from typing import Annotated, List

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from authlink.core.config.settings import settings
from authlink.domain.interfaces.repositories import (
    IExternalLinkRepository,
    ILoginAttemptRepository,
    ISessionRepository,
    IUserRepository,
)
from authlink.domain.interfaces.services import (
    IClock,
    IExternalLinkStateSigner,
    IExternalOAuthClient,
    IPasswordHasher,
    IRefreshTokenHasher,
    ITokenProtector,
)
from authlink.domain.services.auth.authentication_service import AuthenticationService
from authlink.domain.services.auth.jwt_issuer import JwtTokenIssuer
from authlink.domain.services.auth.login_attempts import LoginAttemptRecorder
from authlink.domain.services.auth.session_service import SessionService
from authlink.domain.services.external_link.external_link_service import ExternalLinkService
from authlink.infrastructure.database.async_db import get_async_db
from authlink.infrastructure.repositories import (
    ExternalLinkRepository,
    LoginAttemptRepository,
    SessionRepository,
    UserRepository,
)
from authlink.infrastructure.services.authentication import (
    FernetTokenProtector,
    GoogleOAuthClient,
    HmacExternalLinkStateSigner,
    PasslibPasswordHasher,
    Sha256RefreshTokenHasher,
)
from authlink.infrastructure.services.clock import SystemClock

# ---------------------------------------------------------------------------
# Type aliases for dependency injection
# ---------------------------------------------------------------------------

AsyncDB = Annotated[AsyncSession, Depends(get_async_db)]

# ---------------------------------------------------------------------------
# Infrastructure Layer Dependencies
# ---------------------------------------------------------------------------


def get_clock() -> IClock:
    return SystemClock()


def get_password_hasher() -> IPasswordHasher:
    return PasslibPasswordHasher(settings.BCRYPT_WORK_FACTOR)


def get_refresh_token_hasher() -> IRefreshTokenHasher:
    return Sha256RefreshTokenHasher()


def get_token_issuer(clock: Annotated[IClock, Depends(get_clock)]) -> JwtTokenIssuer:
    """Factory for the access-token issuer.

    A missing signing key does not fail here; the issuer reports it on use so
    that login can turn it into an ordinary failed attempt.
    """
    return JwtTokenIssuer(
        signing_key=settings.JWT_SIGNING_KEY.get_secret_value(),
        issuer=settings.JWT_ISSUER,
        audience=settings.JWT_AUDIENCE,
        clock=clock,
        expiry_minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    )


def get_state_signer(clock: Annotated[IClock, Depends(get_clock)]) -> IExternalLinkStateSigner:
    """Raises `ConfigurationError` when the state signing key is not set."""
    return HmacExternalLinkStateSigner(
        signing_key=settings.EXTERNAL_LINK_STATE_SIGNING_KEY.get_secret_value(),
        clock=clock,
        expiry_minutes=settings.EXTERNAL_LINK_STATE_EXPIRY_MINUTES,
    )


def get_token_protector() -> ITokenProtector:
    """Raises `ConfigurationError` when the encryption key is not set."""
    return FernetTokenProtector(settings.EXTERNAL_TOKEN_ENCRYPTION_KEY.get_secret_value())


def get_oauth_clients() -> List[IExternalOAuthClient]:
    return [
        GoogleOAuthClient(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET.get_secret_value(),
            redirect_uri=settings.GOOGLE_REDIRECT_URI,
            scopes=settings.GOOGLE_SCOPES,
            authorization_endpoint=settings.GOOGLE_AUTHORIZATION_ENDPOINT,
            token_endpoint=settings.GOOGLE_TOKEN_ENDPOINT,
            userinfo_endpoint=settings.GOOGLE_USERINFO_ENDPOINT,
        )
    ]


def get_user_repository(db: AsyncDB) -> IUserRepository:
    return UserRepository(db)


def get_session_repository(db: AsyncDB) -> ISessionRepository:
    return SessionRepository(db)


def get_login_attempt_repository(db: AsyncDB) -> ILoginAttemptRepository:
    return LoginAttemptRepository(db)


def get_external_link_repository(db: AsyncDB) -> IExternalLinkRepository:
    return ExternalLinkRepository(db)


# ---------------------------------------------------------------------------
# Domain Service Dependencies
# ---------------------------------------------------------------------------


def get_authentication_service(
    user_repository: Annotated[IUserRepository, Depends(get_user_repository)],
    session_repository: Annotated[ISessionRepository, Depends(get_session_repository)],
    attempt_repository: Annotated[ILoginAttemptRepository, Depends(get_login_attempt_repository)],
    password_hasher: Annotated[IPasswordHasher, Depends(get_password_hasher)],
    refresh_token_hasher: Annotated[IRefreshTokenHasher, Depends(get_refresh_token_hasher)],
    token_issuer: Annotated[JwtTokenIssuer, Depends(get_token_issuer)],
    clock: Annotated[IClock, Depends(get_clock)],
) -> AuthenticationService:
    return AuthenticationService(
        user_repository=user_repository,
        session_repository=session_repository,
        login_attempts=LoginAttemptRecorder(attempt_repository, clock),
        password_hasher=password_hasher,
        refresh_token_hasher=refresh_token_hasher,
        token_issuer=token_issuer,
        clock=clock,
        refresh_token_expiry_days=settings.REFRESH_TOKEN_EXPIRE_DAYS,
    )


def get_session_service(
    session_repository: Annotated[ISessionRepository, Depends(get_session_repository)],
    user_repository: Annotated[IUserRepository, Depends(get_user_repository)],
    refresh_token_hasher: Annotated[IRefreshTokenHasher, Depends(get_refresh_token_hasher)],
    clock: Annotated[IClock, Depends(get_clock)],
) -> SessionService:
    return SessionService(session_repository, user_repository, refresh_token_hasher, clock)


def get_external_link_service(
    user_repository: Annotated[IUserRepository, Depends(get_user_repository)],
    link_repository: Annotated[IExternalLinkRepository, Depends(get_external_link_repository)],
    state_signer: Annotated[IExternalLinkStateSigner, Depends(get_state_signer)],
    oauth_clients: Annotated[List[IExternalOAuthClient], Depends(get_oauth_clients)],
    token_protector: Annotated[ITokenProtector, Depends(get_token_protector)],
    clock: Annotated[IClock, Depends(get_clock)],
) -> ExternalLinkService:
    return ExternalLinkService(
        user_repository=user_repository,
        link_repository=link_repository,
        state_signer=state_signer,
        oauth_clients=oauth_clients,
        token_protector=token_protector,
        clock=clock,
    )


# ---------------------------------------------------------------------------
# Type aliases for route signatures
# ---------------------------------------------------------------------------

AuthenticationServiceDep = Annotated[AuthenticationService, Depends(get_authentication_service)]
SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]
ExternalLinkServiceDep = Annotated[ExternalLinkService, Depends(get_external_link_service)]
