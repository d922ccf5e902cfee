"""Repository layer for the shortlink service.

This package provides data access objects (repositories) that abstract
database operations and isolate the service layer from SQLAlchemy.
"""

from shortlink.repositories.base import (
    BaseRepository,
    DuplicateEntityError,
    RepositoryError,
    StoreCapacityError,
    StoreUnavailableError,
    classify_store_error,
)
from shortlink.repositories.url_repository import UrlRepository

__all__ = [
    "BaseRepository",
    "DuplicateEntityError",
    "RepositoryError",
    "StoreCapacityError",
    "StoreUnavailableError",
    "UrlRepository",
    "classify_store_error",
]
