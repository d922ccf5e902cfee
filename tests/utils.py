"""Test utilities for shortlink tests."""

import random
import string
from typing import Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from shortlink.db.session import SessionManager
from shortlink.models.url import UrlMapping

SHORT_ID_CHARS = string.ascii_letters + string.digits + "_-"


def random_string(length: int = 10) -> str:
    """Generate a random alphanumeric string."""
    return ''.join(random.choice(string.ascii_letters + string.digits) for _ in range(length))


def random_short_id(length: int = 8) -> str:
    return ''.join(random.choice(SHORT_ID_CHARS) for _ in range(length))


def random_url() -> str:
    """Generate a random URL for testing."""
    domain = f"{random_string(8)}.com"
    path = random_string(12)
    return f"https://{domain}/{path}"


async def create_test_mapping(
    session_factory: async_sessionmaker,
    original_url: Optional[str] = None,
    short_id: Optional[str] = None,
) -> UrlMapping:
    """Persist a mapping in its own committed transaction.

    Seeding through a separate session keeps the row out of the identity
    map of the session under test, as if another request had written it.
    """
    mapping = UrlMapping(
        short_id=short_id or random_short_id(),
        original_url=original_url or random_url(),
    )
    async with SessionManager.transaction_context(session_factory) as db:
        db.add(mapping)
        await db.flush()
        await db.refresh(mapping)
    return mapping


class SequenceIds:
    """Stand-in for ShortenerService.generate_short_id returning fixed values in order."""

    def __init__(self, *short_ids: str):
        self.short_ids = list(short_ids)
        self.calls = 0

    def __call__(self) -> str:
        short_id = self.short_ids[min(self.calls, len(self.short_ids) - 1)]
        self.calls += 1
        return short_id
