"""Database module for the shortlink service."""
from shortlink.db.base import (
    DatabaseHealthCheck,
    create_engine,
    create_session_factory,
    create_tables,
    get_session,
)
from shortlink.db.session import SessionManager, db_transaction, get_db

__all__ = [
    "DatabaseHealthCheck",
    "SessionManager",
    "create_engine",
    "create_session_factory",
    "create_tables",
    "db_transaction",
    "get_db",
    "get_session",
]
