"""
Mock-based unit tests for health route handlers.
Tests the HTTP layer in isolation without real database connections.
"""
import pytest
from unittest.mock import Mock, patch
from fastapi import FastAPI
from fastapi.testclient import TestClient

from taskmcp.api.routes import health


@pytest.fixture
def mock_services():
    """Create mock services."""
    services = Mock()
    services.db = Mock()
    return services


@pytest.fixture
def app():
    """Create a FastAPI app with health router."""
    app = FastAPI()
    app.include_router(health.router.router)
    return app


@pytest.fixture
def client(app):
    """Create a test client."""
    return TestClient(app)


class TestHealthCheck:
    """Test GET /health endpoint."""

    @patch('taskmcp.api.routes.health.get_services')
    @patch('taskmcp.api.routes.health.get_health_info')
    def test_health_check_healthy(
        self, mock_get_health_info, mock_get_services, client, mock_services
    ):
        """Test health check when service is healthy."""
        mock_get_services.return_value = mock_services
        mock_get_health_info.return_value = {"status": "healthy", "uptime_seconds": 100}

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        mock_get_health_info.assert_called_once_with(mock_services.db)

    @patch('taskmcp.api.routes.health.get_services')
    @patch('taskmcp.api.routes.health.get_health_info')
    def test_health_check_unhealthy(
        self, mock_get_health_info, mock_get_services, client, mock_services
    ):
        """Test health check when the database is unavailable."""
        mock_get_services.return_value = mock_services
        mock_get_health_info.return_value = {"status": "unhealthy", "uptime_seconds": 100}

        response = client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestMetrics:
    """Test GET /metrics endpoint."""

    @patch('taskmcp.api.routes.health.get_metrics')
    def test_metrics(self, mock_get_metrics, client):
        """Test metrics are returned in Prometheus text format."""
        mock_get_metrics.return_value = "# HELP http_requests_total Total\n"

        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.text.startswith("# HELP http_requests_total")
        assert response.headers["content-type"].startswith("text/plain")
