"""Authentication and external-link settings.
"""

from typing import List, Union

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


DEFAULT_GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
    "openid",
    "email",
]


class AuthSettings(BaseSettings):
    """Defines settings for credential checks, JWT issuance and refresh sessions.

    Security Note:
        - JWT_SIGNING_KEY is a symmetric HS256 secret. It must be long, random and
          never committed or logged.
        - Missing keys are not fatal at import time; the issuer fails on first use
          with a configuration error instead.
    """

    JWT_SIGNING_KEY: SecretStr = SecretStr("")
    JWT_ISSUER: str = "https://auth.example.com"
    JWT_AUDIENCE: str = "authlink:api:v1"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    BCRYPT_WORK_FACTOR: int = Field(ge=4, le=31, default=12)


class ExternalLinkSettings(BaseSettings):
    """Settings for linking third-party accounts over OAuth2.

    The state signing key and the token encryption key are independent secrets;
    rotating one never invalidates data protected by the other.
    """

    EXTERNAL_LINK_STATE_SIGNING_KEY: SecretStr = SecretStr("")
    EXTERNAL_LINK_STATE_EXPIRY_MINUTES: int = Field(ge=1, default=15)
    EXTERNAL_TOKEN_ENCRYPTION_KEY: SecretStr = SecretStr("")

    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: SecretStr = SecretStr("")
    GOOGLE_REDIRECT_URI: str = ""
    GOOGLE_AUTHORIZATION_ENDPOINT: str = "https://accounts.google.com/o/oauth2/v2/auth"
    GOOGLE_TOKEN_ENDPOINT: str = "https://oauth2.googleapis.com/token"
    GOOGLE_USERINFO_ENDPOINT: str = "https://openidconnect.googleapis.com/v1/userinfo"
    GOOGLE_SCOPES: Union[str, List[str]] = Field(default_factory=lambda: list(DEFAULT_GOOGLE_SCOPES))

    @field_validator("GOOGLE_SCOPES", mode="before")
    @classmethod
    def split_scopes(cls, v: Union[str, List[str]]) -> List[str]:
        """Accepts a space or comma separated string as well as a list."""
        if isinstance(v, str):
            return [scope for scope in v.replace(",", " ").split() if scope]
        return [scope for scope in v if scope and scope.strip()]
