"""Exception-to-HTTP mapping, checked against a bare FastAPI app."""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from authlink.core.exceptions import (
    AuthlinkError,
    ConfigurationError,
    DatabaseError,
    DuplicateUserError,
    ExternalAccountConflictError,
    ExternalLinkNotFoundError,
    ExternalProviderError,
    InvalidCredentialsError,
    LinkStateError,
    LinkStateFailure,
    MissingRefreshTokenError,
    PasswordResetError,
    ProviderMismatchError,
    SessionNotFoundError,
    UnsupportedProviderError,
    UserUnavailableError,
    ValidationError,
)
from authlink.core.handlers import register_exception_handlers
from authlink.core.middleware import configure_middleware

ERRORS = {
    "credentials": InvalidCredentialsError(),
    "validation": ValidationError("Password is required."),
    "duplicate": DuplicateUserError(),
    "conflict": ExternalAccountConflictError("External account is already linked."),
    "state": LinkStateError(LinkStateFailure.EXPIRED),
    "mismatch": ProviderMismatchError(),
    "unsupported": UnsupportedProviderError(),
    "no_refresh": MissingRefreshTokenError(),
    "reset": PasswordResetError("Reset token has expired."),
    "link_missing": ExternalLinkNotFoundError(),
    "session_missing": SessionNotFoundError(),
    "unavailable": UserUnavailableError(),
    "provider": ExternalProviderError(),
    "config": ConfigurationError("EXTERNAL_TOKEN_ENCRYPTION_KEY is missing."),
    "database": DatabaseError("connection refused"),
    "generic": AuthlinkError("boom"),
}


@pytest.fixture
def error_app():
    app = FastAPI()
    configure_middleware(app)
    register_exception_handlers(app)

    @app.get("/raise/{name}")
    async def raise_error(name: str):
        raise ERRORS[name]

    return app


@pytest_asyncio.fixture
async def client(error_app):
    async with AsyncClient(transport=ASGITransport(app=error_app), base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name,status_code",
    [
        ("credentials", 401),
        ("validation", 422),
        ("duplicate", 409),
        ("conflict", 409),
        ("state", 400),
        ("mismatch", 400),
        ("unsupported", 400),
        ("no_refresh", 400),
        ("reset", 400),
        ("link_missing", 404),
        ("session_missing", 404),
        ("unavailable", 403),
        ("provider", 502),
        ("config", 500),
        ("database", 500),
        ("generic", 500),
    ],
)
async def test_status_mapping(client, name, status_code):
    response = await client.get(f"/raise/{name}")

    assert response.status_code == status_code
    assert response.json()["code"] == ERRORS[name].code


@pytest.mark.asyncio
async def test_link_state_error_carries_reason_code(client):
    response = await client.get("/raise/state")
    assert response.json() == {"detail": "State has expired.", "code": "link_state_expired"}


@pytest.mark.asyncio
async def test_server_errors_do_not_leak_internals(client):
    # Act
    config = await client.get("/raise/config")
    database = await client.get("/raise/database")

    # Assert
    assert config.json()["detail"] == "Service is misconfigured."
    assert "ENCRYPTION" not in config.text
    assert database.json()["detail"] == "Internal server error."
    assert "refused" not in database.text


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client):
    response = await client.get("/raise/credentials", headers={"X-Correlation-ID": "req-42"})
    assert response.headers["X-Correlation-ID"] == "req-42"


@pytest.mark.asyncio
async def test_correlation_id_is_generated_when_absent(client):
    response = await client.get("/raise/credentials")
    assert len(response.headers["X-Correlation-ID"]) == 32
