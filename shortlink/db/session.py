"""Session management for database operations.

This module provides utilities for handling SQLAlchemy async sessions
with proper lifecycle management, error handling, and transaction support.
The session factory is read from the application state, where the
application factory put it.
"""

from typing import AsyncGenerator, Callable, Optional, TypeVar
import inspect
import logging
from contextlib import asynccontextmanager
from functools import wraps

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from shortlink.db.base import get_session

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    Yields:
        AsyncSession: A session from the app's session factory.

    Example:
        ```python
        @router.get("/urls/{short_id}")
        async def get_url(short_id: str, db: AsyncSession = Depends(get_db)):
            return await repository.get_by_short_id(db, short_id)
        ```
    """
    async with get_session(request.app.state.session_factory) as session:
        try:
            yield session
        except SQLAlchemyError:
            logger.exception("Database error occurred")
            await session.rollback()
            raise


def db_transaction(db_param_name: Optional[str] = None) -> Callable:
    """Decorator to wrap coroutine functions in a database transaction.

    Finds the database session parameter, commits on success or rolls back
    on error.

    Args:
        db_param_name: Optional name of the database session parameter.
            If not provided, the first parameter annotated as AsyncSession is used.

    Returns:
        Callable: Decorator function

    Example:
        ```python
        @db_transaction(db_param_name="db")
        async def add_mapping(self, db: AsyncSession, data: dict) -> UrlMapping:
            return await self.url_repository.insert(db, data)
        ```
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        parameters = inspect.signature(func).parameters
        db_param_pos = None
        db_param_key = None

        for i, (param_name, param) in enumerate(parameters.items()):
            is_async_session = param.annotation is AsyncSession
            if db_param_name is not None and param_name == db_param_name:
                db_param_pos, db_param_key = i, param_name
                break
            if db_param_name is None and is_async_session:
                db_param_pos, db_param_key = i, param_name
                break

        if db_param_key is None:
            raise ValueError(f"No database session parameter found on '{func.__name__}'")

        @wraps(func)
        async def wrapper(*args, **kwargs):
            if db_param_key in kwargs:
                db = kwargs[db_param_key]
            elif len(args) > db_param_pos:
                db = args[db_param_pos]
            else:
                db = None

            if not isinstance(db, AsyncSession):
                raise ValueError(
                    f"Database session not found in arguments for '{func.__name__}'."
                )

            try:
                result = await func(*args, **kwargs)
                await db.commit()
                return result
            except Exception as e:
                await db.rollback()
                logger.warning(f"Transaction rolled back in '{func.__name__}': {type(e).__name__}")
                raise

        return wrapper
    return decorator


class SessionManager:
    """Session manager with context manager support for work outside a request."""

    @staticmethod
    @asynccontextmanager
    async def transaction_context(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
        """Context manager for a database session with transaction support.

        Commits on successful completion or rolls back on error.
        """
        async with get_session(session_factory) as session:
            try:
                yield session
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.exception(f"Transaction failed: {e}")
                raise
