"""Tests for health check endpoints."""

from unittest.mock import patch

from fastapi.testclient import TestClient


class TestHealthEndpoints:
    """Test health check endpoints."""

    def test_basic_health_check(self, client: TestClient):
        """Test /health returns 200."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "timestamp" in data

    def test_liveness_probe(self, client: TestClient):
        """Test /health/live returns 200."""
        response = client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_readiness_probe(self, client: TestClient):
        """Test /health/ready reports the store and system checks."""
        response = client.get("/health/ready")
        assert response.status_code in [200, 503]
        data = response.json()
        assert set(data["checks"]) == {"store", "disk", "memory"}
        assert data["checks"]["store"]["status"] == "healthy"
        assert data["checks"]["store"]["backend"] == "MemoryDocumentStore"

    def test_readiness_fails_when_store_down(self, client: TestClient):
        with patch.object(client.app.state.store, "get_all", side_effect=RuntimeError("db gone")):
            response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "not_ready"
        assert "store" in data["failed"]

    def test_root(self, client: TestClient):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "Inspectra"
