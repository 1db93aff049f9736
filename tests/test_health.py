"""Tests for health check endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check_healthy(self, client: TestClient):
        """Test health check returns healthy when the database answers."""
        with patch("app.api.routes.health.db_healthcheck", AsyncMock(return_value=True)):
            response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"] == {"database": True}
        assert "version" in data
        assert "timestamp" in data

    def test_health_check_unhealthy(self, client: TestClient):
        """Test health check reports unhealthy when the database is down."""
        with patch("app.api.routes.health.db_healthcheck", AsyncMock(return_value=False)):
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"

    def test_liveness_check(self, client: TestClient):
        """Test liveness check always returns alive."""
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_request_id_generated(self, client: TestClient):
        """Test a request ID is generated when none is supplied."""
        response = client.get("/health/live")

        assert response.headers.get("X-Request-ID")
