import os
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("APP_ENV", "test")

from authlink.domain.services.auth.authentication_service import AuthenticationService
from authlink.domain.services.auth.jwt_issuer import JwtTokenIssuer
from authlink.domain.services.auth.login_attempts import LoginAttemptRecorder
from authlink.domain.services.auth.session_service import SessionService
from authlink.domain.services.external_link.external_link_service import ExternalLinkService
from authlink.infrastructure.services.authentication import (
    FernetTokenProtector,
    HmacExternalLinkStateSigner,
    PasslibPasswordHasher,
    Sha256RefreshTokenHasher,
)
from tests.utils.fakes import (
    FrozenClock,
    InMemoryExternalLinkRepository,
    InMemoryLoginAttemptRepository,
    InMemorySessionRepository,
    InMemoryUserRepository,
    StubOAuthClient,
)
from tests.utils.keys import (
    TEST_ENCRYPTION_KEY,
    TEST_JWT_AUDIENCE,
    TEST_JWT_ISSUER,
    TEST_JWT_SIGNING_KEY,
    TEST_STATE_SIGNING_KEY,
)


@pytest.fixture
def clock():
    """A frozen clock pinned to the real current second, so issued JWTs still verify."""
    return FrozenClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def password_hasher():
    return PasslibPasswordHasher(work_factor=4)


@pytest.fixture
def refresh_token_hasher():
    return Sha256RefreshTokenHasher()


@pytest.fixture
def user_repository():
    return InMemoryUserRepository()


@pytest.fixture
def session_repository():
    return InMemorySessionRepository()


@pytest.fixture
def attempt_repository():
    return InMemoryLoginAttemptRepository()


@pytest.fixture
def link_repository():
    return InMemoryExternalLinkRepository()


@pytest.fixture
def token_issuer(clock):
    return JwtTokenIssuer(
        signing_key=TEST_JWT_SIGNING_KEY,
        issuer=TEST_JWT_ISSUER,
        audience=TEST_JWT_AUDIENCE,
        clock=clock,
        expiry_minutes=60,
    )


@pytest.fixture
def state_signer(clock):
    return HmacExternalLinkStateSigner(TEST_STATE_SIGNING_KEY, clock, expiry_minutes=15)


@pytest.fixture
def token_protector():
    return FernetTokenProtector(TEST_ENCRYPTION_KEY)


@pytest.fixture
def oauth_client():
    return StubOAuthClient()


@pytest.fixture
def auth_service(
    user_repository,
    session_repository,
    attempt_repository,
    password_hasher,
    refresh_token_hasher,
    token_issuer,
    clock,
):
    return AuthenticationService(
        user_repository=user_repository,
        session_repository=session_repository,
        login_attempts=LoginAttemptRecorder(attempt_repository, clock),
        password_hasher=password_hasher,
        refresh_token_hasher=refresh_token_hasher,
        token_issuer=token_issuer,
        clock=clock,
        refresh_token_expiry_days=30,
    )


@pytest.fixture
def session_service(session_repository, user_repository, refresh_token_hasher, clock):
    return SessionService(session_repository, user_repository, refresh_token_hasher, clock)


@pytest.fixture
def link_service(user_repository, link_repository, state_signer, oauth_client, token_protector, clock):
    return ExternalLinkService(
        user_repository=user_repository,
        link_repository=link_repository,
        state_signer=state_signer,
        oauth_clients=[oauth_client],
        token_protector=token_protector,
        clock=clock,
    )


@pytest.fixture
def app(auth_service, session_service, link_service, token_issuer, user_repository):
    """The FastAPI application with every service wired to the in-memory fakes."""
    from authlink.core.application import create_application
    from authlink.infrastructure.dependency_injection.auth_dependencies import (
        get_authentication_service,
        get_external_link_service,
        get_session_service,
        get_token_issuer,
        get_user_repository,
    )

    application = create_application()
    application.dependency_overrides[get_authentication_service] = lambda: auth_service
    application.dependency_overrides[get_session_service] = lambda: session_service
    application.dependency_overrides[get_external_link_service] = lambda: link_service
    application.dependency_overrides[get_token_issuer] = lambda: token_issuer
    application.dependency_overrides[get_user_repository] = lambda: user_repository
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
