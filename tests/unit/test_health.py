"""
Tests for health check endpoints.
"""

from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from educonnect.main import app

client = TestClient(app)

HEALTHY_POOL = {
    "healthy": True,
    "service": "database_pool",
    "pool_stats": {"pool_size": 2, "pool_available": 2},
}


def test_healthz_endpoint():
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "educonnect-analytics"}


def test_healthz_echoes_request_id():
    response = client.get("/healthz", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"


def test_readyz_endpoint_database_healthy():
    with patch("educonnect.routes.health.db_health_check", AsyncMock(return_value=HEALTHY_POOL)):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is True
    assert data["checks"]["database"]["ok"] is True
    assert data["checks"]["database"]["pool_size"] == 2
    assert data["checks"]["configuration"]["ok"] is True
    assert data["checks"]["configuration"]["default_timezone"] == "UTC"


def test_readyz_endpoint_database_unhealthy():
    unhealthy = {"healthy": False, "error": "Pool not initialized", "service": "database_pool"}
    with patch("educonnect.routes.health.db_health_check", AsyncMock(return_value=unhealthy)):
        response = client.get("/readyz")

    assert response.status_code == 200
    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["database"]["error"] == "Pool not initialized"
    assert data["checks"]["configuration"]["ok"] is True


def test_readyz_endpoint_database_check_raises():
    with patch(
        "educonnect.routes.health.db_health_check",
        AsyncMock(side_effect=RuntimeError("socket closed")),
    ):
        response = client.get("/readyz")

    data = response.json()
    assert data["overall_ok"] is False
    assert data["checks"]["database"]["error"] == "RuntimeError: socket closed"


def test_database_health_without_pool():
    # TestClient without a context manager never runs the lifespan
    response = client.get("/health/database")

    assert response.status_code == 200
    assert response.json() == {
        "healthy": False,
        "error": "Pool not initialized",
        "service": "database_pool",
    }
