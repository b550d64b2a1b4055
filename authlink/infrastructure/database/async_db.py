from __future__ import annotations

"""
Asynchronous Database Module

This module provides the asynchronous database plumbing used by every
repository: the SQLAlchemy async engine (asyncpg driver), a session factory,
a FastAPI dependency yielding sessions, and a connectivity check for the
health endpoint.

**Security Note**: Ensure that the database connection URL (DATABASE_URL) is configured for SSL/TLS when
connecting over untrusted networks. asyncpg does not understand 'sslmode' in connect_args; the parameter
is stripped from the URL and must be expressed as asyncpg 'ssl' instead. Never log the connection URL.

Key Components:
    - engine: The asynchronous SQLAlchemy engine for PostgreSQL connections.
    - AsyncSessionFactory: A factory for creating asynchronous database sessions.
    - get_async_db: A FastAPI dependency yielding async sessions.
    - check_database_health: Runs `SELECT 1` against the database.
    - create_async_db_and_tables: Utility to create tables using the async engine.
"""

import urllib.parse as urlparse
from typing import AsyncGenerator

import structlog
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

import authlink.domain.entities  # noqa: F401  registers tables on SQLModel.metadata
from authlink.core.config.settings import settings

logger = structlog.get_logger(__name__)


def _build_async_url() -> str:
    """
    Build the asynchronous database URL.

    Replaces a psycopg2 driver with asyncpg and drops `sslmode`, which asyncpg
    does not accept.

    Returns:
        str: The cleaned asynchronous database URL.
    """
    async_url = settings.DATABASE_URL.replace("postgresql+psycopg2", "postgresql+asyncpg")
    parsed = urlparse.urlparse(async_url)
    query = dict(urlparse.parse_qsl(parsed.query))
    query.pop("sslmode", None)
    parsed = parsed._replace(query=urlparse.urlencode(query))
    return urlparse.urlunparse(parsed)


engine = create_async_engine(
    make_url(_build_async_url()),
    echo=settings.DEBUG,
    pool_size=settings.POSTGRES_POOL_SIZE,
    max_overflow=settings.POSTGRES_MAX_OVERFLOW,
    pool_timeout=settings.POSTGRES_POOL_TIMEOUT,
    pool_pre_ping=True,
)

AsyncSessionFactory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an AsyncSession.

    Rolls the transaction back if the request fails and always closes the
    session.

    Yields:
        AsyncSession: An asynchronous database session for use in FastAPI routes.
    """
    async with AsyncSessionFactory() as session:  # pragma: no cover – boilerplate
        try:
            yield session
        except Exception:  # noqa: BLE001 – Any DB error must trigger rollback
            await session.rollback()
            logger.error("async_db_session_rollback")
            raise


async def check_database_health() -> bool:
    """Returns True when the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:  # noqa: BLE001 – reported as unhealthy, not raised
        logger.error("database_health_check_failed", error_type=type(e).__name__)
        return False


async def create_async_db_and_tables() -> None:
    """
    Create tables using the async engine.

    Schema migrations are out of scope; this is used for local development and
    integration environments.
    """
    logger.info("creating_database_tables")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("database_tables_created")
