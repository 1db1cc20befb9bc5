"""Health endpoint tests."""

import pytest
from falcon.asgi import App
from falcon.testing import TestClient

from permset.interfaces.api.resources.health import HealthResource

from tests.conftest import FakeStoreAdapter


@pytest.fixture
def client(store: FakeStoreAdapter) -> TestClient:
    """Create test client with health endpoints."""
    app = App()
    health = HealthResource(store)
    app.add_route("/v1/health", health)
    app.add_route("/v1/health/ready", health, suffix="ready")
    return TestClient(app)


def test_health_liveness(client: TestClient) -> None:
    """GET /v1/health returns 200."""
    result = client.simulate_get("/v1/health")
    assert result.status_code == 200
    assert result.json["status"] == "ok"


def test_health_ready(client: TestClient) -> None:
    """GET /v1/health/ready returns 200 when the database answers."""
    result = client.simulate_get("/v1/health/ready")
    assert result.status_code == 200
    assert result.json["status"] == "ready"


def test_health_not_ready(client: TestClient, store: FakeStoreAdapter) -> None:
    """GET /v1/health/ready returns 503 when the database does not."""
    store.ready = False
    result = client.simulate_get("/v1/health/ready")
    assert result.status_code == 503
