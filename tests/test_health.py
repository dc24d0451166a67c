"""Tests for health endpoints."""

from fastapi.testclient import TestClient

from studio.main import create_app


class TestHealthEndpoints:
    """Test suite for health check endpoints."""

    def test_healthz_always_returns_alive(self, client: TestClient):
        """Liveness probe should always return 200."""
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "alive"}

    def test_readyz_when_running(self, client: TestClient):
        response = client.get("/readyz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["active_sessions"] == 0
        assert data["available_slots"] == 5

    def test_readyz_counts_sessions(self, client: TestClient):
        client.post("/streams", json={"avatar_id": "casual-neutral"})

        data = client.get("/readyz").json()

        assert data["active_sessions"] == 1
        assert data["available_slots"] == 4

    def test_readyz_503_before_startup(self, test_settings):
        """Without the lifespan running the app is not ready."""
        client = TestClient(create_app(settings=test_settings))

        response = client.get("/readyz")

        assert response.status_code == 503
        assert response.json() == {"status": "not_ready"}

    def test_metrics_endpoint(self, client: TestClient):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "studio_sessions_initialized_total" in response.text

    def test_metrics_disabled(self, test_settings):
        settings = test_settings.model_copy(update={"metrics_enabled": False})

        with TestClient(create_app(settings=settings)) as client:
            response = client.get("/metrics")

        assert response.status_code == 404
