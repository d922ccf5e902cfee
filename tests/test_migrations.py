"""Tests for the Alembic migrations."""

import hashlib
import sqlite3

import pytest
from fastapi.testclient import TestClient

from shortlink.core.alembic import get_current_revision, run_migrations, to_sync_url
from shortlink.core.config import Settings
from shortlink.main import create_app

HEAD = "0002"


@pytest.fixture
def database_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'shortlink.db'}"


def sha256(url: str) -> str:
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


def test_to_sync_url():
    assert to_sync_url("sqlite+aiosqlite:///./x.db") == "sqlite:///./x.db"
    assert to_sync_url("postgresql+asyncpg://u:p@db/x") == "postgresql+psycopg://u:p@db/x"
    assert to_sync_url("postgresql+psycopg://u:p@db/x") == "postgresql+psycopg://u:p@db/x"


def test_upgrade_to_head(database_url, tmp_path):
    assert get_current_revision(database_url) is None

    run_migrations(database_url)
    assert get_current_revision(database_url) == HEAD

    # Running again is a no-op
    run_migrations(database_url)
    assert get_current_revision(database_url) == HEAD

    with sqlite3.connect(tmp_path / "shortlink.db") as conn:
        indexes = {
            row[0] for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type='index' AND tbl_name='url_mappings'"
            )
        }
    assert "ix_url_mappings_url_hash" in indexes
    assert "ix_url_mappings_created_at" in indexes
    assert "ix_url_mappings_original_url" not in indexes


def test_migrated_schema_rejects_duplicate_urls(database_url, tmp_path):
    run_migrations(database_url)

    with sqlite3.connect(tmp_path / "shortlink.db") as conn:
        conn.execute(
            "INSERT INTO url_mappings (short_id, original_url, url_hash, created_at) "
            "VALUES ('first001', 'https://example.com', ?, '2026-01-01 00:00:00')",
            (sha256("https://example.com"),),
        )
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO url_mappings (short_id, original_url, url_hash, created_at) "
                "VALUES ('second01', 'https://example.com', ?, '2026-01-01 00:00:00')",
                (sha256("https://example.com"),),
            )


def test_hash_migration_backfills_existing_rows(database_url, tmp_path):
    run_migrations(database_url, revision="0001")

    with sqlite3.connect(tmp_path / "shortlink.db") as conn:
        conn.execute(
            "INSERT INTO url_mappings (short_id, original_url, created_at) "
            "VALUES ('before01', 'https://example.com/before', '2026-01-01 00:00:00')"
        )

    run_migrations(database_url)
    assert get_current_revision(database_url) == HEAD

    with sqlite3.connect(tmp_path / "shortlink.db") as conn:
        row = conn.execute(
            "SELECT original_url, url_hash FROM url_mappings WHERE short_id = 'before01'"
        ).fetchone()
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(
                "INSERT INTO url_mappings (short_id, original_url, url_hash, created_at) "
                "VALUES ('hashless', 'https://example.com/new', NULL, '2026-01-01 00:00:00')"
            )
    assert row == ("https://example.com/before", sha256("https://example.com/before"))


def test_app_migrates_on_startup(database_url):
    app_settings = Settings(
        ENVIRONMENT="testing",
        DATABASE_URL=database_url,
        DB_AUTO_MIGRATE=True,
        LOG_TO_FILE=False,
        OTEL_ENABLED=False,
    )

    with TestClient(create_app(app_settings)) as client:
        response = client.post("/api/urls", json={"url": "https://example.com/migrated"})
        assert response.status_code == 201
        again = client.post("/api/urls", json={"url": "https://example.com/migrated"})
        assert again.status_code == 200

    assert get_current_revision(database_url) == HEAD
