"""Tests for FastAPI application entry point."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from rbxstatus import __version__
from rbxstatus.config import CacheSettings, CorsSettings, ServerSettings, Settings
from rbxstatus.core.cache import MemoryCacheBackend
from rbxstatus.main import create_app


@pytest.fixture
def test_client(test_settings):
    """Create test client with rate limiting disabled."""
    return TestClient(create_app(test_settings), raise_server_exceptions=False)


class TestAppCreation:
    """Tests for application creation."""

    def test_app_metadata(self, test_settings):
        """Test app has correct title and version."""
        app = create_app(test_settings)
        assert app.title == "rbxstatus"
        assert app.version == __version__

    def test_service_attached_to_state(self, test_settings):
        """Test one status service is created per app."""
        app = create_app(test_settings)
        assert app.state.status_service.cache.backend_name == "memory"
        assert app.state.settings is test_settings


class TestCorsConfiguration:
    """Tests for CORS middleware configuration."""

    def test_cors_allows_configured_origin(self):
        """Test CORS allows configured origins."""
        settings = Settings(
            server=ServerSettings(cors=CorsSettings(allowed_origins=["http://localhost:3000"]))
        )
        client = TestClient(create_app(settings))

        response = client.options(
            "/status",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.headers.get("access-control-allow-origin") == "http://localhost:3000"

    def test_wildcard_origin_by_default(self, test_client):
        """Test any origin is allowed by default."""
        response = test_client.get("/health", headers={"Origin": "https://example.com"})
        assert response.headers.get("access-control-allow-origin") == "*"


class TestRouteRegistration:
    """Tests for route registration."""

    def test_health_endpoint_exists(self, test_client):
        """Test health endpoint is registered."""
        assert test_client.get("/health").status_code == 200

    def test_unknown_path_returns_json_404(self, test_client):
        """Test unknown paths return a structured 404."""
        response = test_client.get("/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {
            "error": "NOT_FOUND",
            "message": "The requested endpoint does not exist",
            "path": "/does-not-exist",
        }

    def test_responses_carry_request_id(self, test_client):
        """Test every response has an X-Request-ID header."""
        response = test_client.get("/health")
        assert response.headers.get("X-Request-ID")


class TestExceptionHandlers:
    """Tests for exception handlers."""

    def test_unhandled_exception_returns_json(self, test_settings):
        """Test unhandled exceptions return structured JSON."""
        app = create_app(test_settings)

        @app.get("/test-error")
        async def raise_error():
            raise RuntimeError("Test error")

        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/test-error")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "INTERNAL_SERVER_ERROR"
        assert data["message"] == "An unexpected error occurred"


class TestLifespan:
    """Tests for startup and shutdown."""

    def test_memory_cache_without_redis(self, test_settings):
        """Test startup keeps the in-process cache when Redis is disabled."""
        app = create_app(test_settings)

        with TestClient(app) as client:
            assert client.get("/health").json()["cache"] == "memory"

    def test_redis_selected_at_startup(self):
        """Test startup switches to Redis when it is enabled and reachable."""
        settings = Settings(cache=CacheSettings(redis_enabled=True, redis_url="redis://localhost:6379/0"))
        app = create_app(settings)
        redis_backend = MagicMock()
        redis_backend.name = "redis"
        redis_backend.close = AsyncMock()

        with patch("rbxstatus.main.select_cache_backend", AsyncMock(return_value=redis_backend)):
            with TestClient(app) as client:
                assert client.get("/health").json()["cache"] == "redis"

        redis_backend.close.assert_awaited_once()

    def test_redis_unreachable_falls_back(self):
        """Test startup survives an unreachable Redis."""
        settings = Settings(cache=CacheSettings(redis_enabled=True, redis_url="redis://localhost:6379/0"))
        app = create_app(settings)

        with patch("rbxstatus.main.select_cache_backend", AsyncMock(return_value=MemoryCacheBackend())):
            with TestClient(app) as client:
                assert client.get("/health").json()["cache"] == "memory"

    def test_invalid_config_fails_startup(self, monkeypatch):
        """Test startup fails when required settings are missing."""
        monkeypatch.delenv("REDIS_URL", raising=False)
        app = create_app(Settings(cache=CacheSettings(redis_enabled=True)))

        with pytest.raises(ValueError):
            with TestClient(app):
                pass
