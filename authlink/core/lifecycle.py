"""Application lifecycle management.

This module handles application startup and shutdown events, ensuring proper
initialization and cleanup of application resources.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from authlink.core.config.settings import settings
from authlink.core.logging import logger
from authlink.infrastructure.database.async_db import (
    check_database_health,
    create_async_db_and_tables,
    engine,
)


def create_lifespan_manager():
    """Create the application lifespan manager.

    Returns:
        AsyncContextManager: The lifespan manager for the FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Checks the database and creates tables on startup, disposes the pool on shutdown.

        Raises:
            RuntimeError: If database is unavailable during startup
        """
        settings.validate_required_fields()
        if not await check_database_health():
            logger.error("database_unavailable_on_startup")
            raise RuntimeError("Database unavailable")
        await create_async_db_and_tables()
        logger.info("application_startup", env=settings.APP_ENV, version=settings.VERSION)

        yield

        await engine.dispose()
        logger.info("application_shutdown", env=settings.APP_ENV)

    return lifespan
