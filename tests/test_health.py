"""Tests for health check endpoints."""

import pytest
from fastapi.testclient import TestClient

from variations.domain import Product
from variations.infrastructure.config import settings
from variations.main import app


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "variations-api"
    assert "version" in data


def test_readiness_check(client: TestClient, variable_product: Product) -> None:
    """Test readiness endpoint reports store counts."""
    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["products"] == 1
    assert data["variations"] == 2


def test_startup_seeds_demo_catalog(monkeypatch: pytest.MonkeyPatch) -> None:
    """Startup configures logging and seeds the demo catalog when enabled."""
    monkeypatch.setattr(settings, "seed_demo_catalog", True)

    with TestClient(app) as client:
        data = client.get("/ready").json()

    assert data["products"] == 3
    assert data["variations"] == 4
