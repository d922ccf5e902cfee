"""Alembic migration utilities.

Schema changes for the ``url_mappings`` table are applied with Alembic
rather than by editing the database by hand. These helpers run the
migrations shipped in ``migrations/`` against a given database URL.
"""

import logging
from pathlib import Path
from typing import Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine

logger = logging.getLogger(__name__)

PROJECT_DIR = Path(__file__).resolve().parent.parent.parent
ALEMBIC_DIR = PROJECT_DIR / "migrations"
ALEMBIC_INI = PROJECT_DIR / "alembic.ini"


def to_sync_url(database_url: str) -> str:
    """Swap an async driver for its sync counterpart; Alembic runs synchronously."""
    if database_url.startswith("sqlite+aiosqlite://"):
        return database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)
    if database_url.startswith("postgresql+asyncpg://"):
        return database_url.replace("postgresql+asyncpg://", "postgresql+psycopg://", 1)
    return database_url


def get_alembic_config(database_url: str) -> Config:
    config = Config(str(ALEMBIC_INI))
    config.set_main_option("script_location", str(ALEMBIC_DIR))
    # ConfigParser interpolation treats "%" as special
    config.set_main_option("sqlalchemy.url", to_sync_url(database_url).replace("%", "%%"))
    # Logging is already routed through loguru by the application
    config.attributes["configure_logger"] = False
    return config


def run_migrations(database_url: str, revision: str = "head") -> None:
    """Upgrade the database schema to ``revision``.

    Args:
        database_url: SQLAlchemy URL of the target database (async drivers allowed)
        revision: Target revision, ``head`` by default
    """
    try:
        command.upgrade(get_alembic_config(database_url), revision)
        logger.info(f"Applied Alembic migrations up to {revision}")
    except Exception as e:
        logger.error(f"Failed to run migrations: {e}")
        raise


def get_current_revision(database_url: str) -> Optional[str]:
    """Return the revision the database is currently stamped with."""
    engine = create_engine(to_sync_url(database_url))
    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    finally:
        engine.dispose()
