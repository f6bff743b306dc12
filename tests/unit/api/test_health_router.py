"""Unit tests for the health endpoint and app factory."""

from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from paywall.api import create_app
from paywall.db.repositories import MemoryAccountRepository


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_memory_backend_reports_disabled(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["database"]["status"] == "disabled"

    def test_unreachable_database_is_unhealthy(self, client, app):
        db = MagicMock()
        db.enabled = True
        db.test_connection = AsyncMock(return_value=False)
        db.close = AsyncMock()
        app.state.db = db

        data = client.get("/health").json()

        assert data["status"] == "unhealthy"
        assert data["components"]["database"]["status"] == "unhealthy"

    def test_reachable_database_is_healthy(self, client, app):
        db = MagicMock()
        db.enabled = True
        db.test_connection = AsyncMock(return_value=True)
        db.close = AsyncMock()
        app.state.db = db

        assert client.get("/health").json()["components"]["database"]["status"] == "healthy"


class TestCreateApp:
    """Tests for the application factory and lifespan."""

    def test_lifespan_builds_memory_backend_when_database_disabled(self, monkeypatch):
        monkeypatch.setenv("DATABASE_ENABLED", "false")
        app = create_app()

        with TestClient(app):
            assert isinstance(app.state.repositories.accounts, MemoryAccountRepository)
            assert app.state.access_service is not None
            assert app.state.db.enabled is False

    def test_api_prefix_from_env(self, monkeypatch, repositories):
        monkeypatch.setenv("API_PREFIX", "/v2")
        app = create_app(repositories=repositories)

        with TestClient(app) as client:
            assert client.get("/v2/strategies").status_code == 200
            assert client.get("/api/v1/strategies").status_code == 404

    def test_invalid_cors_origins_falls_back(self, monkeypatch, repositories):
        monkeypatch.setenv("CORS_ORIGINS", "not-json")
        app = create_app(repositories=repositories)

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
