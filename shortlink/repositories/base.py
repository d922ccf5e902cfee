"""Base repository implementation for the shortlink service.

This module provides the store error taxonomy and a generic BaseRepository
that the URL repository builds on. SQLAlchemy failures are classified by
exception type into the kinds the service layer understands.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union
import logging

from pydantic import BaseModel
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

T = TypeVar("T", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Base exception for repository errors; on its own it means an unknown store failure."""
    pass


class DuplicateEntityError(RepositoryError):
    """Exception raised when a primary key or unique constraint is violated."""

    def __init__(self, model_type: Type[SQLModel], message: str = ""):
        self.model_type = model_type
        model_name = getattr(model_type, "__name__", "Entity")
        super().__init__(f"{model_name} conflicts with an existing record{': ' + message if message else ''}")


class StoreUnavailableError(RepositoryError):
    """The store is not reachable or its schema is not provisioned."""
    pass


class StoreCapacityError(RepositoryError):
    """The store rejected the call for lack of capacity (e.g. connection pool exhausted)."""
    pass


# DBAPI error families that mean the database or table cannot be used at all
_UNAVAILABLE_ERRORS = (
    sa_exc.OperationalError,
    sa_exc.ProgrammingError,
    sa_exc.InterfaceError,
    sa_exc.DisconnectionError,
    ConnectionError,
)

# PostgreSQL SQLSTATEs for load rather than provisioning problems:
# too_many_connections, query_canceled (statement timeout),
# lock_not_available (lock timeout), deadlock_detected
_CAPACITY_SQLSTATES = frozenset({"53300", "57014", "55P03", "40P01"})

# SQLite reports lock contention as "database is locked" / SQLITE_BUSY
_CAPACITY_MESSAGES = ("database is locked", "database table is locked", "database is busy")


def is_capacity_error(error: Exception) -> bool:
    """Tell whether a DBAPI failure means the store is overloaded or contended.

    Looks at the driver exception wrapped by SQLAlchemy: its SQLSTATE for
    PostgreSQL drivers, its error name or message for SQLite.
    """
    orig = getattr(error, "orig", None) or error
    candidates = [orig, getattr(orig, "__cause__", None)]

    for candidate in candidates:
        if candidate is None:
            continue
        sqlstate = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if sqlstate in _CAPACITY_SQLSTATES:
            return True
        if getattr(candidate, "sqlite_errorname", None) in ("SQLITE_BUSY", "SQLITE_LOCKED"):
            return True

    message = str(orig).lower()
    return any(text in message for text in _CAPACITY_MESSAGES)


def classify_store_error(error: Exception, model_type: Type[SQLModel]) -> RepositoryError:
    """Map a raw store exception to a repository error kind.

    Args:
        error: Exception raised by SQLAlchemy or the driver
        model_type: Model the failing operation worked on

    Returns:
        The repository error to raise in its place
    """
    if isinstance(error, RepositoryError):
        return error
    if isinstance(error, sa_exc.IntegrityError):
        return DuplicateEntityError(model_type, str(error.orig))
    if isinstance(error, sa_exc.TimeoutError):
        return StoreCapacityError(f"Store capacity exceeded: {error}")
    if isinstance(error, sa_exc.DBAPIError) and is_capacity_error(error):
        return StoreCapacityError(f"Store capacity exceeded: {error}")
    if isinstance(error, _UNAVAILABLE_ERRORS):
        return StoreUnavailableError(f"Store unavailable: {error}")
    return RepositoryError(f"Database error: {error}")


class BaseRepository(Generic[T, CreateSchemaType]):
    """
    Base repository implementing common operations for SQLModel entities.

    Type parameters:
        T: The SQLModel type this repository manages
        CreateSchemaType: The Pydantic model type for creation operations
    """

    def __init__(self, model_type: Type[T]):
        self.model_type = model_type

    def _store_error(self, error: Exception, action: str) -> RepositoryError:
        classified = classify_store_error(error, self.model_type)
        logger.error(
            f"Error {action} {self.model_type.__name__}: "
            f"{type(classified).__name__}: {error}"
        )
        return classified

    async def get_by_id(self, db: AsyncSession, id: Any) -> Optional[T]:
        """
        Get an entity by its primary key.

        Args:
            db: Database session
            id: Primary key value

        Returns:
            The entity if found, None otherwise
        """
        try:
            return await db.get(self.model_type, id)
        except Exception as e:
            raise self._store_error(e, "retrieving") from e

    async def create(self, db: AsyncSession, data: Union[CreateSchemaType, Dict[str, Any]]) -> T:
        """
        Create a new entity.

        The session is rolled back when the insert fails so that it can be
        reused by the caller, for example to re-read the conflicting row.

        Args:
            db: Database session
            data: Entity data (either as a Pydantic model or dictionary)

        Returns:
            The created entity

        Raises:
            DuplicateEntityError: If a unique constraint is violated
            StoreUnavailableError: If the store cannot be reached
            StoreCapacityError: If the store is out of capacity
            RepositoryError: On other database errors
        """
        if isinstance(data, BaseModel):
            data_dict = data.model_dump(exclude_unset=True)
        else:
            data_dict = data

        entity = self.model_type(**data_dict)
        try:
            db.add(entity)
            await db.flush()
            await db.refresh(entity)
            return entity
        except Exception as e:
            await db.rollback()
            raise self._store_error(e, "creating") from e
