"""URL Repository for the shortlink service.

This module provides the UrlRepository class, the store interface the
shortener service consumes: a point lookup by short identifier, a limited
reverse lookup by original URL, and a conditional insert.
"""

from typing import Any, Dict, Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.models.url import UrlMapping, UrlMappingCreate, url_digest
from shortlink.repositories.base import BaseRepository, DuplicateEntityError  # noqa: F401


class UrlRepository(BaseRepository[UrlMapping, UrlMappingCreate]):
    """
    Repository for UrlMapping database operations.

    Mappings are immutable, so the repository exposes no update or delete.
    """

    def __init__(self):
        super().__init__(UrlMapping)

    async def get_by_short_id(self, db: AsyncSession, short_id: str) -> Optional[UrlMapping]:
        """
        Find a mapping by its short identifier (primary key lookup).

        Raises:
            RepositoryError: On database errors, classified by kind
        """
        return await self.get_by_id(db, short_id)

    async def find_by_original_url(self, db: AsyncSession, original_url: str) -> Optional[UrlMapping]:
        """
        Find the mapping for a sanitized original URL.

        The lookup goes through the url_hash index and compares the full URL
        as well. Only existence matters, so the query is limited to one row.

        Raises:
            RepositoryError: On database errors, classified by kind
        """
        try:
            query = (
                select(self.model_type)
                .where(self.model_type.url_hash == url_digest(original_url))
                .where(self.model_type.original_url == original_url)
                .limit(1)
            )
            result = await db.execute(query)
            return result.scalars().first()
        except Exception as e:
            raise self._store_error(e, "querying by original URL") from e

    async def insert(
        self,
        db: AsyncSession,
        data: Union[UrlMappingCreate, Dict[str, Any]]
    ) -> UrlMapping:
        """
        Insert a new mapping if neither its short_id nor its original_url exists.

        The primary key and the unique url_hash index make this a
        conditional insert; the loser of a race gets DuplicateEntityError.

        Raises:
            DuplicateEntityError: If the short_id or original_url is taken
            StoreUnavailableError: If the store cannot be reached
            StoreCapacityError: If the store is out of capacity
            RepositoryError: On other database errors
        """
        return await self.create(db, data)
