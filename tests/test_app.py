"""Application wiring tests."""

import importlib

import pytest
from falcon.testing import TestClient

from permset.config import Settings
from permset.domain.value_objects import Relation
from permset.interfaces.api.app import create_app
from permset.main import build_resources

from tests.conftest import FakeStoreAdapter, permission_row


@pytest.mark.parametrize(
    "module",
    [
        "permset.main",
        "permset.application.ports.repositories",
        "permset.infrastructure.persistence.permission_repository",
        "permset.infrastructure.persistence.permission_set_repository",
        "permset.application.services.permission_aggregator",
    ],
)
def test_module_imports(module: str) -> None:
    """Composition root and repositories import cleanly."""
    assert importlib.import_module(module) is not None


def test_built_app_serves_health_and_lists(store: FakeStoreAdapter) -> None:
    """An app wired by build_resources answers health and list requests."""
    store.seed(Relation.PERMISSION, permission_row("p1"))
    client = TestClient(create_app(build_resources(store, Settings())))

    assert client.simulate_get("/v1/health").status_code == 200
    result = client.simulate_get("/v1/permissions")
    assert result.status_code == 200
    assert [item["id"] for item in result.json["items"]] == ["p1"]
