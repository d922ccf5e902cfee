"""Database base configuration for SQLAlchemy with SQLModel.

This module builds the async engine and session factory from settings.
Nothing here is created at import time: the application factory owns the
engine and disposes of it on shutdown.
"""

from typing import Any, AsyncGenerator, Dict
import asyncio
import logging
from contextlib import asynccontextmanager

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool
from sqlalchemy.sql import text
from sqlmodel import SQLModel

from shortlink.core.config import Settings

logger = logging.getLogger(__name__)


def get_engine_config(app_settings: Settings) -> Dict[str, Any]:
    """Get the engine configuration for the configured environment and backend.

    Returns:
        Dict: Engine configuration parameters
    """
    url = make_url(app_settings.SQLALCHEMY_DATABASE_URI)

    if url.get_backend_name() == "sqlite":
        config: Dict[str, Any] = {
            "echo": app_settings.DB_ECHO,
            "connect_args": {"check_same_thread": False},
        }
        # Every connection to an in-memory database is a new, empty database
        if url.database in (None, "", ":memory:"):
            config["poolclass"] = StaticPool
        return config

    if app_settings.ENVIRONMENT.value == "testing":
        return {"echo": False, "poolclass": NullPool}

    return {
        "echo": app_settings.DB_ECHO,
        "pool_size": app_settings.POSTGRES_POOL_SIZE,
        "max_overflow": app_settings.POSTGRES_POOL_MAX_OVERFLOW,
        "pool_timeout": app_settings.POSTGRES_POOL_TIMEOUT,
        "pool_recycle": app_settings.POSTGRES_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


def create_engine(app_settings: Settings) -> AsyncEngine:
    """Create and configure an async SQLAlchemy engine.

    Returns:
        AsyncEngine: Configured SQLAlchemy async engine instance.
    """
    engine_url = app_settings.SQLALCHEMY_DATABASE_URI
    logger.info(f"Creating database engine for {make_url(engine_url).render_as_string(hide_password=True)}")
    return create_async_engine(engine_url, **get_engine_config(app_settings))


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables known to SQLModel metadata if they do not exist."""
    # Ensure the table models are registered
    from shortlink.models import url  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


@asynccontextmanager
async def get_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Get async session with proper cleanup.

    Yields:
        AsyncSession: SQLAlchemy async session
    """
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


class DatabaseHealthCheck:
    """Health check functionality for the database connection."""

    @staticmethod
    async def check_connection(session_factory: async_sessionmaker) -> Dict:
        """Check database connectivity and return status.

        Returns:
            Dict: Health check result containing status and latency information
        """
        loop = asyncio.get_running_loop()
        start_time = loop.time()
        status = "healthy"
        error_message = None
        latency_ms = 0

        try:
            async with get_session(session_factory) as session:
                await session.execute(text("SELECT 1"))
            latency_ms = int((loop.time() - start_time) * 1000)
        except Exception as e:
            status = "unhealthy"
            error_message = str(e)
            logger.error(f"Database health check failed: {e}")

        return {
            "status": status,
            "latency_ms": latency_ms,
            "error": error_message,
        }
