"""Test fixtures for the shortlink application."""

import os

# Settings are read when shortlink.core.config is first imported
os.environ.update({
    "ENVIRONMENT": "testing",
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "LOG_TO_FILE": "false",
    "LOG_LEVEL": "WARNING",
    "OTEL_ENABLED": "false",
    "BASE_URL": "https://sho.rt",
})

import pytest
import pytest_asyncio
from typing import AsyncGenerator, Generator
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from shortlink.core.config import Settings
from shortlink.db.base import create_session_factory
from shortlink.main import create_app
from shortlink.repositories.url_repository import UrlRepository
from shortlink.services.shortener import ShortenerService
# Import models to ensure they're registered with SQLModel metadata
from shortlink.models.url import UrlMapping  # noqa: F401


# Test database URL - using SQLite in-memory
TEST_SQLALCHEMY_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory SQLite engine with the schema for each test."""
    engine = create_async_engine(
        TEST_SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def url_repository() -> UrlRepository:
    """Return URL repository instance."""
    return UrlRepository()


@pytest.fixture
def shortener_service(url_repository) -> ShortenerService:
    """Return a shortener service with the default settings."""
    return ShortenerService(url_repository=url_repository)


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an application backed by its own in-memory database."""
    return Settings(
        ENVIRONMENT="testing",
        DATABASE_URL=TEST_SQLALCHEMY_DATABASE_URL,
        BASE_URL="https://sho.rt",
        LOG_TO_FILE=False,
        LOG_LEVEL="WARNING",
        OTEL_ENABLED=False,
    )


@pytest.fixture
def test_app(test_settings) -> FastAPI:
    """Create a FastAPI test app; its lifespan creates the tables."""
    return create_app(test_settings)


@pytest.fixture
def client(test_app) -> Generator[TestClient, None, None]:
    """Return FastAPI TestClient instance."""
    with TestClient(test_app) as test_client:
        yield test_client
