"""Basic tests to verify database setup."""

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import NullPool, StaticPool

from shortlink.core.config import Settings
from shortlink.db.base import DatabaseHealthCheck, create_tables, get_engine_config
from shortlink.db.session import SessionManager, db_transaction
from shortlink.models.url import UrlMapping


@pytest.mark.asyncio
async def test_create_tables(test_db):
    """Verify tables are created correctly in test database."""
    result = await test_db.execute(text("SELECT name FROM sqlite_master WHERE type='table' AND name='url_mappings'"))
    tables = [row[0] for row in result.fetchall()]
    assert "url_mappings" in tables

    result = await test_db.execute(text("SELECT name FROM sqlite_master WHERE type='index' AND tbl_name='url_mappings'"))
    indexes = {row[0] for row in result.fetchall()}
    assert "ix_url_mappings_url_hash" in indexes
    assert "ix_url_mappings_original_url" not in indexes

    mapping = UrlMapping(short_id="test1234", original_url="https://example.com")
    test_db.add(mapping)
    await test_db.commit()

    fetched = await test_db.get(UrlMapping, "test1234")
    assert fetched is not None
    assert fetched.original_url == "https://example.com"
    assert fetched.created_at is not None


@pytest.mark.asyncio
async def test_create_tables_is_idempotent(test_engine):
    await create_tables(test_engine)
    await create_tables(test_engine)


@pytest.mark.asyncio
async def test_health_check(session_factory):
    result = await DatabaseHealthCheck.check_connection(session_factory)
    assert result["status"] == "healthy"
    assert result["error"] is None


@pytest.mark.asyncio
async def test_transaction_context_commits(session_factory):
    async with SessionManager.transaction_context(session_factory) as db:
        db.add(UrlMapping(short_id="commit01", original_url="https://example.com/commit"))

    async with session_factory() as db:
        assert await db.get(UrlMapping, "commit01") is not None


@pytest.mark.asyncio
async def test_transaction_context_rolls_back(session_factory):
    with pytest.raises(RuntimeError):
        async with SessionManager.transaction_context(session_factory) as db:
            db.add(UrlMapping(short_id="rollbk01", original_url="https://example.com/rollback"))
            await db.flush()
            raise RuntimeError("abort")

    async with session_factory() as db:
        assert await db.get(UrlMapping, "rollbk01") is None


class TestDbTransaction:

    @pytest.mark.asyncio
    async def test_commits_on_success(self, test_db, session_factory):
        @db_transaction()
        async def add(db: AsyncSession, short_id: str):
            db.add(UrlMapping(short_id=short_id, original_url=f"https://example.com/{short_id}"))

        await add(test_db, "txok0001")

        async with session_factory() as db:
            assert await db.get(UrlMapping, "txok0001") is not None

    @pytest.mark.asyncio
    async def test_rolls_back_on_error(self, test_db, session_factory):
        @db_transaction(db_param_name="db")
        async def add_then_fail(db, short_id: str):
            db.add(UrlMapping(short_id=short_id, original_url=f"https://example.com/{short_id}"))
            await db.flush()
            raise ValueError("fail")

        with pytest.raises(ValueError):
            await add_then_fail(test_db, "txbad001")

        async with session_factory() as db:
            assert await db.get(UrlMapping, "txbad001") is None

    def test_requires_session_parameter(self):
        with pytest.raises(ValueError):
            @db_transaction()
            async def no_session(value: int):
                return value

    @pytest.mark.asyncio
    async def test_rejects_missing_session(self):
        @db_transaction(db_param_name="db")
        async def needs_db(db):
            return db

        with pytest.raises(ValueError):
            await needs_db(None)


def test_engine_config_for_memory_sqlite():
    config = get_engine_config(Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:"))
    assert config["poolclass"] is StaticPool
    assert config["connect_args"] == {"check_same_thread": False}


def test_engine_config_for_postgres_in_testing():
    config = get_engine_config(Settings(DATABASE_URL="postgresql+asyncpg://u:p@db/shortlink", ENVIRONMENT="testing"))
    assert config["poolclass"] is NullPool


def test_engine_config_for_postgres():
    config = get_engine_config(
        Settings(DATABASE_URL="postgresql+asyncpg://u:p@db/shortlink", ENVIRONMENT="production", POSTGRES_POOL_SIZE=5)
    )
    assert config["pool_size"] == 5
    assert config["pool_pre_ping"] is True
