"""URL shortening service for the shortlink application.

This module contains the ShortenerService class, which maps URLs to short
identifiers (create-or-get) and resolves short identifiers back to URLs.
"""

import logging
import secrets
from typing import Optional

from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from shortlink.core.config import settings
from shortlink.core.telemetry import get_meter, get_tracer
from shortlink.db.session import db_transaction
from shortlink.models.url import ShortenResult, UrlMapping
from shortlink.repositories.base import (
    DuplicateEntityError,
    RepositoryError,
    StoreCapacityError,
    StoreUnavailableError,
    classify_store_error,
)
from shortlink.repositories.url_repository import UrlRepository
from shortlink.services.exceptions import (
    CapacityExceededError,
    DataIntegrityError,
    InternalServiceError,
    InvalidShortIdError,
    InvalidURLError,
    ServiceError,
    ServiceUnavailableError,
    ShortIdGenerationError,
    URLNotFoundError,
)
from shortlink.services.validation import validate_short_id, validate_url

logger = logging.getLogger(__name__)

tracer = get_tracer("shortlink.services.shortener")
meter = get_meter("shortlink.services.shortener")

urls_created = meter.create_counter(
    name="shortlink.urls.created",
    description="Number of new short URL mappings",
    unit="1",
)
urls_deduplicated = meter.create_counter(
    name="shortlink.urls.deduplicated",
    description="Number of create requests answered with an existing mapping",
    unit="1",
)
redirects = meter.create_counter(
    name="shortlink.redirects",
    description="Number of short identifiers resolved",
    unit="1",
)


class ShortenerService:
    """
    Service for the short identifier allocation and resolution protocol.

    The service holds no mutable state; the repository and session passed
    to each call are the only shared resources.
    """

    def __init__(
        self,
        url_repository: UrlRepository,
        short_id_length: Optional[int] = None,
        alphabet: Optional[str] = None,
        max_attempts: Optional[int] = None,
        max_url_length: Optional[int] = None,
    ):
        """
        Initialize the shortener service.

        Args:
            url_repository: Repository for mapping data access
            short_id_length: Length of generated identifiers
            alphabet: Characters generated identifiers are drawn from
            max_attempts: Identifiers tried before giving up on collisions
            max_url_length: Longest URL accepted for shortening
        """
        self.url_repository = url_repository
        self.short_id_length = short_id_length or settings.SHORT_ID_LENGTH
        self.alphabet = alphabet or settings.SHORT_ID_ALPHABET
        self.max_attempts = max_attempts or settings.SHORT_ID_MAX_ATTEMPTS
        self.max_url_length = max_url_length or settings.URL_MAX_LENGTH

    async def create_short_url(self, db: AsyncSession, raw_url) -> ShortenResult:
        """
        Return the mapping for ``raw_url``, creating it on first request.

        Args:
            db: Database session
            raw_url: URL as supplied by the caller

        Returns:
            ShortenResult: The mapping, with ``created`` False when it already existed

        Raises:
            InvalidURLError: If the URL fails validation (no store access happens)
            ServiceUnavailableError: If the store is not reachable
            CapacityExceededError: If the store is throttling
            InternalServiceError: On any other failure
        """
        result = validate_url(raw_url, max_length=self.max_url_length)
        if not result.ok:
            raise InvalidURLError(result.error)

        with tracer.start_as_current_span("shortener.create_short_url"):
            try:
                outcome = await self._create_or_get(db, result.value)
            except ServiceError:
                raise
            except Exception as e:
                raise self._map_store_error(e, "creating short URL") from e

        if outcome.created:
            urls_created.add(1)
            logger.info(f"Created short ID {outcome.short_id}")
        else:
            urls_deduplicated.add(1)
        return outcome

    @db_transaction(db_param_name="db")
    async def _create_or_get(self, db: AsyncSession, original_url: str) -> ShortenResult:
        existing = await self.url_repository.find_by_original_url(db, original_url)
        if existing is not None:
            return ShortenResult.from_mapping(existing, created=False)

        for attempt in range(1, self.max_attempts + 1):
            short_id = self.generate_short_id()
            try:
                mapping = await self.url_repository.insert(
                    db, {"short_id": short_id, "original_url": original_url}
                )
                return ShortenResult.from_mapping(mapping, created=True)
            except DuplicateEntityError:
                # Either a concurrent request stored this URL first, or the
                # generated identifier is taken. Only the first has a row to return.
                winner = await self.url_repository.find_by_original_url(db, original_url)
                if winner is not None:
                    logger.info(f"Concurrent create for the same URL resolved to {winner.short_id}")
                    return ShortenResult.from_mapping(winner, created=False)
                logger.warning(
                    f"Short ID collision on attempt {attempt}/{self.max_attempts}, generating a new one"
                )

        raise ShortIdGenerationError("Internal server error")

    async def resolve_short_url(self, db: AsyncSession, short_id) -> str:
        """
        Resolve a short identifier to its original URL.

        Raises:
            InvalidShortIdError: If the identifier is malformed (no store access happens)
            URLNotFoundError: If no mapping exists
            DataIntegrityError: If the stored mapping has no usable URL
            ServiceUnavailableError: If the store is not reachable
            CapacityExceededError: If the store is throttling
            InternalServiceError: On any other failure
        """
        mapping = await self.get_url_mapping(db, short_id)
        redirects.add(1)
        return mapping.original_url

    async def get_url_mapping(self, db: AsyncSession, short_id) -> UrlMapping:
        """
        Fetch and check the mapping for a short identifier.

        Raises the same errors as ``resolve_short_url``.
        """
        result = validate_short_id(short_id)
        if not result.ok:
            raise InvalidShortIdError(result.error)

        with tracer.start_as_current_span("shortener.get_url_mapping") as span:
            span.set_attribute("shortlink.short_id", result.value)
            try:
                mapping = await self.url_repository.get_by_short_id(db, result.value)
            except Exception as e:
                raise self._map_store_error(e, "resolving short URL") from e

        if mapping is None:
            raise URLNotFoundError("URL not found")

        original_url = getattr(mapping, "original_url", None)
        if not original_url or not isinstance(original_url, str):
            logger.error(f"Invalid data in database for short ID {result.value}: {mapping!r}")
            raise DataIntegrityError("Invalid URL data")

        return mapping

    def generate_short_id(self) -> str:
        """Draw a short identifier from a cryptographically secure source."""
        return "".join(secrets.choice(self.alphabet) for _ in range(self.short_id_length))

    def _map_store_error(self, error: Exception, action: str) -> ServiceError:
        # Commit failures surface from the transaction wrapper, outside the repository
        if isinstance(error, sa_exc.SQLAlchemyError):
            error = classify_store_error(error, UrlMapping)
        if isinstance(error, StoreUnavailableError):
            logger.error(f"Store unavailable while {action}: {error}")
            return ServiceUnavailableError("Database table not found")
        if isinstance(error, StoreCapacityError):
            logger.warning(f"Store capacity exceeded while {action}: {error}")
            return CapacityExceededError("Service temporarily unavailable. Please try again.")
        if isinstance(error, RepositoryError):
            logger.error(f"Store error while {action}: {error}")
        else:
            logger.exception(f"Unexpected error while {action}")
        return InternalServiceError("Internal server error")
