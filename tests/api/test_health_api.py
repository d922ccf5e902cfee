"""Tests for the health check endpoints."""

import pytest


@pytest.mark.api
class TestHealthEndpoints:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["environment"] == "testing"
        assert body["components"]["database"]["status"] == "healthy"
        assert "error" not in body["components"]["database"]

    def test_readiness(self, client):
        response = client.get("/api/health/ready")

        assert response.status_code == 200
        assert response.json() == {"ready": True, "components": {"api": True, "database": True}}

    def test_liveness(self, client):
        response = client.get("/api/health/live")

        assert response.status_code == 200
        assert response.json() == {"alive": True}
