"""Tests for the redirect endpoint."""

import pytest
from unittest.mock import AsyncMock, MagicMock

from shortlink.api.dependencies import get_url_repository
from shortlink.repositories.base import StoreUnavailableError
from shortlink.repositories.url_repository import UrlRepository


def create(client, url: str) -> dict:
    return client.post("/api/urls", json={"url": url}).json()["data"]


@pytest.mark.api
class TestRedirectEndpoint:

    def test_redirect(self, client):
        created = create(client, "https://example.com/target?x=1")

        response = client.get(f"/short/{created['shortId']}", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "https://example.com/target?x=1"

    def test_short_url_is_routable(self, client):
        created = create(client, "https://example.com/routable")
        path = created["shortUrl"].removeprefix("https://sho.rt")

        response = client.get(path, follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "https://example.com/routable"

    def test_repeated_redirects(self, client):
        created = create(client, "https://example.com/repeat")

        for _ in range(3):
            response = client.get(f"/short/{created['shortId']}", follow_redirects=False)
            assert response.status_code == 301
            assert response.headers["location"] == "https://example.com/repeat"

    def test_not_found(self, client):
        response = client.get("/short/missing1", follow_redirects=False)

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "URL not found"}

    @pytest.mark.parametrize("short_id", ["ab", "a" * 13, "abc.123"])
    def test_invalid_short_id(self, client, short_id):
        response = client.get(f"/short/{short_id}", follow_redirects=False)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid short ID format"}

    def test_store_unavailable(self, client, test_app):
        repository = MagicMock(spec=UrlRepository)
        repository.get_by_short_id = AsyncMock(side_effect=StoreUnavailableError("no table"))
        test_app.dependency_overrides[get_url_repository] = lambda: repository

        response = client.get("/short/abcdef12", follow_redirects=False)

        assert response.status_code == 503
        assert response.json() == {"success": False, "error": "Database table not found"}
        assert response.headers["Retry-After"] == "1"

    def test_unknown_route(self, client):
        response = client.get("/nothing/here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Not Found"}
