"""Shared fixtures for the test suite."""

import pytest
from fastapi.testclient import TestClient

from variations.application.auth import Identity, Role
from variations.catalog import (
    CatalogStore,
    create_variable_product,
    get_catalog_store,
    reset_catalog_store,
)
from variations.domain import Product
from variations.infrastructure.config import settings
from variations.main import app

CUSTOMER_API_KEY = "test-customer-key"


@pytest.fixture(autouse=True)
def reset_store() -> None:
    """Start every test with an empty catalog store."""
    reset_catalog_store()


@pytest.fixture
def store() -> CatalogStore:
    """The shared catalog store."""
    return get_catalog_store()


@pytest.fixture
def variable_product(store: CatalogStore) -> Product:
    """Variable product with SMALL (id+1) and LARGE (id+2) variations."""
    return create_variable_product(store)


@pytest.fixture
def admin() -> Identity:
    """Administrator identity."""
    return Identity.for_role(Role.ADMINISTRATOR, user_id=1)


@pytest.fixture
def customer() -> Identity:
    """Authenticated identity without product capabilities."""
    return Identity.for_role(Role.CUSTOMER, user_id=2)


@pytest.fixture
def client() -> TestClient:
    """Create test client without authentication."""
    return TestClient(app)


@pytest.fixture
def auth_client() -> TestClient:
    """Create test client authenticated as an administrator."""
    return TestClient(
        app,
        headers={"Authorization": f"Bearer {settings.admin_api_key}"},
    )


@pytest.fixture
def customer_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """Create test client authenticated as a customer."""
    monkeypatch.setattr(settings, "customer_api_key", CUSTOMER_API_KEY)
    return TestClient(
        app,
        headers={"Authorization": f"Bearer {CUSTOMER_API_KEY}"},
    )


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Get administrator authentication headers."""
    return {"Authorization": f"Bearer {settings.admin_api_key}"}
