"""
Alembic Environment Configuration

Runs migrations for the shortlink SQLModel metadata. Alembic uses sync
drivers, so async URLs from the settings are converted before connecting.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection
from sqlmodel import SQLModel

from shortlink.core.alembic import to_sync_url
from shortlink.core.config import settings
from shortlink.models import url  # noqa: F401  registers the tables on SQLModel.metadata

config = context.config

# Helpers in shortlink.core.alembic pass an explicit URL; the CLI falls back to settings
database_url = config.get_main_option("sqlalchemy.url") or to_sync_url(settings.SQLALCHEMY_DATABASE_URI)

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode, emitting SQL to the script output."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(database_url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        do_run_migrations(connection)

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
