from __future__ import annotations

"""Centralized, structured exception hierarchy for authlink.

This module defines the custom exceptions raised by the authentication and
external-link subsystems. They carry a machine-readable `code` for programmatic
error handling and a human-readable `message` for logging and user feedback.

The hierarchy is designed to:
- Keep authentication failures generic so callers cannot enumerate accounts.
- Give protocol failures (OAuth state, provider mismatch) specific but
  non-sensitive messages.
- Map cleanly to HTTP status codes in the API layer.
- Offer a consistent structure for logging and monitoring.
"""

from enum import Enum
from typing import Final

__all__: Final = [
    "AuthlinkError",
    "AuthenticationError",
    "InvalidCredentialsError",
    "InvalidRefreshTokenError",
    "ValidationError",
    "DuplicateUserError",
    "PasswordResetError",
    "DuplicateSessionError",
    "SessionNotFoundError",
    "UserUnavailableError",
    "ExternalLinkError",
    "LinkStateFailure",
    "LinkStateError",
    "ProviderMismatchError",
    "UnsupportedProviderError",
    "ExternalAccountConflictError",
    "MissingRefreshTokenError",
    "ExternalLinkNotFoundError",
    "ExternalProviderError",
    "ConfigurationError",
    "TokenConfigurationError",
    "DatabaseError",
    "EncryptionError",
    "DecryptionError",
]


class AuthlinkError(Exception):
    """Base exception class for all custom errors in authlink.

    Attributes:
        message (str): A human-readable error message, suitable for logging.
        code (str): A unique, machine-readable error code for identifying
                    the type of error programmatically.
    """

    message: str
    code: str = "generic_error"

    def __init__(self, message: str, code: str = "generic_error"):
        self.message = message
        self.code = code
        Exception.__init__(self, self.message)

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Auth-related errors (401)
# ---------------------------------------------------------------------------


class AuthenticationError(AuthlinkError):
    """Raised for general authentication failures.

    Maps to a `401 Unauthorized` HTTP status code.
    """

    def __init__(self, message: str, code: str = "authentication_error"):
        super().__init__(message, code)


class InvalidCredentialsError(AuthenticationError):
    """Raised when a login attempt fails for any reason.

    The message is always the same generic text; the concrete cause is only
    recorded in the login-attempt audit log.
    """

    def __init__(self, message: str = "Invalid username or password.", code: str = "invalid_credentials"):
        super().__init__(message, code)


class InvalidRefreshTokenError(AuthenticationError):
    """Raised when a refresh token is unknown, revoked, expired or orphaned."""

    def __init__(
        self, message: str = "Refresh token is invalid or expired.", code: str = "invalid_refresh_token"
    ):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Validation errors
# ---------------------------------------------------------------------------


class ValidationError(AuthlinkError):
    """Raised for malformed input caught before any side effect (422)."""

    def __init__(self, message: str, code: str = "validation_error"):
        super().__init__(message, code)


class DuplicateUserError(AuthlinkError):
    """Raised when a username or email is already taken (409)."""

    def __init__(self, message: str = "Username or email already exists.", code: str = "duplicate_user"):
        super().__init__(message, code)


class PasswordResetError(AuthlinkError):
    """Raised when a password reset cannot be completed (400)."""

    def __init__(self, message: str, code: str = "password_reset_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Session errors
# ---------------------------------------------------------------------------


class DuplicateSessionError(AuthlinkError):
    """Raised when a refresh-token hash is already stored (409)."""

    def __init__(self, message: str = "Refresh token already exists.", code: str = "duplicate_session"):
        super().__init__(message, code)


class SessionNotFoundError(AuthlinkError):
    """Raised when a session does not exist or is not owned by the caller (404)."""

    def __init__(self, message: str = "Session not found.", code: str = "session_not_found"):
        super().__init__(message, code)


class UserUnavailableError(AuthlinkError):
    """Raised when the acting user is missing, deleted or locked (403)."""

    def __init__(self, message: str = "User is not available.", code: str = "user_unavailable"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# External link / protocol errors
# ---------------------------------------------------------------------------


class ExternalLinkError(AuthlinkError):
    """Base class for failures of the external-account link protocol (400)."""

    def __init__(self, message: str, code: str = "external_link_error"):
        super().__init__(message, code)


class LinkStateFailure(str, Enum):
    """Reasons a signed link state can be rejected."""

    MISSING = "missing"
    MALFORMED = "malformed"
    INVALID_USER_ID = "invalid_user_id"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"


_LINK_STATE_MESSAGES = {
    LinkStateFailure.MISSING: "State is missing.",
    LinkStateFailure.MALFORMED: "State format is invalid.",
    LinkStateFailure.INVALID_USER_ID: "State user identifier is invalid.",
    LinkStateFailure.INVALID_SIGNATURE: "State signature is invalid.",
    LinkStateFailure.EXPIRED: "State has expired.",
}


class LinkStateError(ExternalLinkError):
    """Raised when an OAuth link state fails validation.

    Attributes:
        reason (LinkStateFailure): Which check rejected the state.
    """

    def __init__(self, reason: LinkStateFailure):
        self.reason = reason
        super().__init__(_LINK_STATE_MESSAGES[reason], f"link_state_{reason.value}")


class ProviderMismatchError(ExternalLinkError):
    def __init__(self, message: str = "Provider mismatch.", code: str = "provider_mismatch"):
        super().__init__(message, code)


class UnsupportedProviderError(ExternalLinkError):
    def __init__(self, message: str = "Unsupported external provider.", code: str = "unsupported_provider"):
        super().__init__(message, code)


class ExternalAccountConflictError(ExternalLinkError):
    """Raised when linking would break identity uniqueness (409)."""

    def __init__(self, message: str, code: str = "external_account_conflict"):
        super().__init__(message, code)


class MissingRefreshTokenError(ExternalLinkError):
    def __init__(
        self,
        message: str = "Refresh token is required to link the external account.",
        code: str = "missing_refresh_token",
    ):
        super().__init__(message, code)


class ExternalLinkNotFoundError(ExternalLinkError):
    """Raised when no link exists for the user and provider (404)."""

    def __init__(self, message: str = "External provider is not linked.", code: str = "external_link_not_found"):
        super().__init__(message, code)


class ExternalProviderError(AuthlinkError):
    """Raised when the OAuth provider fails or answers with unusable data (502).

    The API layer never forwards provider internals; the message stays generic.
    """

    def __init__(self, message: str = "External provider request failed.", code: str = "provider_error"):
        super().__init__(message, code)


# ---------------------------------------------------------------------------
# Configuration / infrastructure errors (500)
# ---------------------------------------------------------------------------


class ConfigurationError(AuthlinkError):
    """Raised when a required key or setting is missing. Never retried."""

    def __init__(self, message: str, code: str = "configuration_error"):
        super().__init__(message, code)


class TokenConfigurationError(ConfigurationError):
    """Raised by the JWT issuer when its signing configuration is incomplete."""

    def __init__(self, message: str = "JWT configuration is missing.", code: str = "jwt_configuration_missing"):
        super().__init__(message, code)


class DatabaseError(AuthlinkError):
    """Wraps unexpected storage failures."""

    def __init__(self, message: str, code: str = "database_error"):
        super().__init__(message, code)


class EncryptionError(AuthlinkError):
    """Raised when protecting a provider token fails."""

    def __init__(self, message: str = "Token encryption failed.", code: str = "encryption_error"):
        super().__init__(message, code)


class DecryptionError(AuthlinkError):
    """Raised when a protected token cannot be decrypted (wrong key, purpose or tampering)."""

    def __init__(self, message: str = "Token decryption failed.", code: str = "decryption_error"):
        super().__init__(message, code)
