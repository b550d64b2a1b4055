"""Main application settings and configuration management.

This module composes all the application settings from the different modules
(app, database, auth, external link) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, missing secrets only produce warnings
- Test: Uses .env.test, missing secrets only produce warnings
- Production: Uses .env.production, missing secrets are fatal
"""

import logging
import os
from pathlib import Path
from typing import ClassVar

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings, ExternalLinkSettings
from .database import DatabaseSettings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)
logging.getLogger("passlib").setLevel(logging.ERROR)


class Settings(AppSettings, DatabaseSettings, AuthSettings, ExternalLinkSettings):
    """The main settings class that aggregates all application configurations.

    Security Note:
        - JWT_SIGNING_KEY, EXTERNAL_LINK_STATE_SIGNING_KEY and
          EXTERNAL_TOKEN_ENCRYPTION_KEY are process-wide secrets. They are read
          once when services are built and never logged.
    Usage:
        - Access settings via the singleton instance `settings` at the
          composition root; domain services receive the values they need
          through their constructors.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    REQUIRED_SECRETS: ClassVar[tuple[str, ...]] = (
        "JWT_SIGNING_KEY",
        "EXTERNAL_LINK_STATE_SIGNING_KEY",
        "EXTERNAL_TOKEN_ENCRYPTION_KEY",
    )

    def missing_secrets(self) -> list[str]:
        """Names of the required secrets that are unset or blank."""
        missing = []
        for field in self.REQUIRED_SECRETS:
            value = getattr(self, field, None)
            if value is None or not value.get_secret_value().strip():
                missing.append(field)
        return missing

    def validate_required_fields(self) -> None:
        """Validates that all required secrets are set.

        Raises ValueError if any secret is missing and the application runs in
        production. Other environments only log a warning, so that the service
        can start and fail on first use of the missing key instead.

        Raises:
            ValueError: If required fields are missing in production.
        """
        missing_fields = self.missing_secrets()
        if not missing_fields:
            logger.info("All required secrets are set.")
            return

        error_msg = f"Missing required environment variables: {', '.join(missing_fields)}"
        if self.APP_ENV == "production":
            logger.error(error_msg)
            raise ValueError(error_msg)
        logger.warning(f"{self.APP_ENV} mode: {error_msg}")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
        return Settings()
    logger.warning(f"No .env file found, using environment variables only (environment: {env})")
    return Settings()


# Singleton instance of the settings used by the composition root.
settings = create_settings()
settings.validate_required_fields()
