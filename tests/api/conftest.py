"""Fixtures for API tests."""

import pytest
from falcon.testing import TestClient

from permset.config import Settings
from permset.interfaces.api.app import create_app
from permset.interfaces.api.middleware.auth import RequestUser
from permset.main import build_resources

from tests.conftest import FakeStoreAdapter


class AuthBypassMiddleware:
    """Middleware that sets a fixed session user for testing."""

    async def process_request(self, req, resp):
        req.context.user = RequestUser(
            user_id="test-user-1",
            email="tester@example.com",
            attributes={"id": "test-user-1", "email": "tester@example.com"},
        )
        req.context.organization_id = req.get_header("X-Organization-Id")


@pytest.fixture
def settings() -> Settings:
    return Settings(authorization_mode="both", pagination_default_limit=2)


@pytest.fixture
def app(store: FakeStoreAdapter, settings: Settings):
    """Falcon ASGI app over the in-memory store."""
    return create_app(build_resources(store, settings), middleware=[AuthBypassMiddleware()])


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)
