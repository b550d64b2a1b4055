from __future__ import annotations

"""
Global exception handlers for the FastAPI application.

This module contains centralized handlers for the authlink exception
hierarchy, translating domain errors into HTTP responses of the form
`{"detail": <message>, "code": <code>}`.

Starlette resolves handlers along the exception's MRO, so a subclass with its
own handler (e.g. `ExternalAccountConflictError`) wins over its base
(`ExternalLinkError`).
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette import status
from structlog import get_logger

from authlink.core.exceptions import (
    AuthenticationError,
    AuthlinkError,
    ConfigurationError,
    DatabaseError,
    DuplicateSessionError,
    DuplicateUserError,
    ExternalAccountConflictError,
    ExternalLinkError,
    ExternalLinkNotFoundError,
    ExternalProviderError,
    PasswordResetError,
    SessionNotFoundError,
    UserUnavailableError,
    ValidationError,
)

__all__ = [
    "authentication_error_handler",
    "validation_error_handler",
    "conflict_error_handler",
    "bad_request_error_handler",
    "not_found_error_handler",
    "user_unavailable_error_handler",
    "external_provider_error_handler",
    "configuration_error_handler",
    "authlink_error_handler",
    "register_exception_handlers",
]

logger = get_logger(__name__)


def _error_response(status_code: int, exc: AuthlinkError, message: str | None = None, **kwargs) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": message or exc.message, "code": exc.code},
        **kwargs,
    )


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


async def authentication_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
    """Handles `AuthenticationError`, returning a `401 Unauthorized`.

    This handler catches failed logins, rejected refresh tokens and invalid
    bearer tokens. The message is always the generic one the service chose.

    Args:
        request: The incoming `Request` object.
        exc: The `AuthenticationError` instance.

    Returns:
        A `JSONResponse` with a 401 status code and error detail.
    """
    logger.warning(
        "Authentication failure",
        error=exc.code,
        client_ip=_client_ip(request),
        path=request.url.path,
    )
    return _error_response(
        status.HTTP_401_UNAUTHORIZED,
        exc,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handles `ValidationError`, returning a `422 Unprocessable Entity`."""
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, exc)


async def conflict_error_handler(request: Request, exc: AuthlinkError) -> JSONResponse:
    """Handles uniqueness conflicts, returning a `409 Conflict`.

    Used for duplicate users, duplicate sessions and external accounts that are
    already linked elsewhere.
    """
    logger.info("Conflict", error=exc.code, path=request.url.path)
    return _error_response(status.HTTP_409_CONFLICT, exc)


async def bad_request_error_handler(request: Request, exc: AuthlinkError) -> JSONResponse:
    """Handles protocol and reset failures, returning a `400 Bad Request`.

    Covers `PasswordResetError` and every `ExternalLinkError` without a more
    specific handler: invalid link state, provider mismatch, unsupported
    provider and a missing refresh token.
    """
    logger.info("Rejected request", error=exc.code, path=request.url.path)
    return _error_response(status.HTTP_400_BAD_REQUEST, exc)


async def not_found_error_handler(request: Request, exc: AuthlinkError) -> JSONResponse:
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


async def user_unavailable_error_handler(request: Request, exc: UserUnavailableError) -> JSONResponse:
    return _error_response(status.HTTP_403_FORBIDDEN, exc)


async def external_provider_error_handler(request: Request, exc: ExternalProviderError) -> JSONResponse:
    """Handles `ExternalProviderError`, returning a `502 Bad Gateway`.

    Provider internals were already logged where the call failed; the response
    only carries the service's own message.
    """
    logger.warning("External provider failure", error=exc.code, detail=exc.message, path=request.url.path)
    return _error_response(status.HTTP_502_BAD_GATEWAY, exc)


async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    """Handles `ConfigurationError`, returning a `500` without naming the missing setting."""
    logger.error("Service misconfigured", error=exc.code, detail=exc.message, path=request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, message="Service is misconfigured.")


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Handles `DatabaseError`, returning a `500 Internal Server Error`.

    Args:
        request: The incoming `Request` object.
        exc: The `DatabaseError` instance.

    Returns:
        A `JSONResponse` with a 500 status code and a generic error detail.
    """
    logger.error("Database error", error=exc.code, detail=exc.message, path=request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, message="Internal server error.")


async def authlink_error_handler(request: Request, exc: AuthlinkError) -> JSONResponse:
    """Handles the base `AuthlinkError`, returning a `500 Internal Server Error`.

    This serves as a fallback for any custom application errors that do not
    have a more specific handler.
    """
    logger.error("Unhandled application error", error=exc.code, detail=exc.message, path=request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, message="Internal server error.")


def register_exception_handlers(app: FastAPI) -> None:
    """Registers all custom exception handlers with the FastAPI application.

    Args:
        app: The `FastAPI` application instance.
    """
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(DuplicateUserError, conflict_error_handler)
    app.add_exception_handler(DuplicateSessionError, conflict_error_handler)
    app.add_exception_handler(ExternalAccountConflictError, conflict_error_handler)
    app.add_exception_handler(PasswordResetError, bad_request_error_handler)
    app.add_exception_handler(ExternalLinkError, bad_request_error_handler)
    app.add_exception_handler(ExternalLinkNotFoundError, not_found_error_handler)
    app.add_exception_handler(SessionNotFoundError, not_found_error_handler)
    app.add_exception_handler(UserUnavailableError, user_unavailable_error_handler)
    app.add_exception_handler(ExternalProviderError, external_provider_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(AuthlinkError, authlink_error_handler)
