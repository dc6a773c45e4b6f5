"""API tests for catalog, business config and local answers."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from spa_chat.api import dependencies as deps
from spa_chat.app import app
from spa_chat.db.catalog import CatalogRepository
from spa_chat.ingest.catalog import load_catalog

CATALOG_PATH = Path(__file__).resolve().parents[1] / "data" / "catalog.yaml"


@pytest.fixture
def client(fake_completion) -> TestClient:
    with TestClient(app) as test_client:
        load_catalog(CATALOG_PATH, CatalogRepository(deps.get_database()))
        yield test_client


def test_services_include_aliases(client: TestClient) -> None:
    resp = client.get("/services")
    assert resp.status_code == 200
    services = resp.json()
    assert [service["id"] for service in services][:2] == ["massage", "facial"]
    hot_stone = next(service for service in services if service["id"] == "hot-stone")
    assert "hot stone" in hot_stone["aliases"]


def test_assist_hot_stone(client: TestClient, fake_completion) -> None:
    resp = client.post("/assist", json={"text": "tell me about hot stone"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["service"]["id"] == "hot-stone"
    assert data["answer"].endswith("Would you like to book it?")
    assert fake_completion.calls == []


def test_assist_validation_error_is_400(client: TestClient) -> None:
    resp = client.post("/assist", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Bad request"


def test_business_and_refresh(client: TestClient) -> None:
    resp = client.get("/business")
    assert resp.status_code == 200
    assert resp.json()["hours"]["sat"] == "10:00–18:00"

    catalog = CatalogRepository(deps.get_database())
    config = catalog.get_business_config()
    config.address = "9 New Street"
    catalog.save_business_config(config)
    assert client.get("/business").json()["address"] != "9 New Street"
    assert client.post("/business/refresh").json()["address"] == "9 New Street"


def test_business_missing_is_404(fake_completion) -> None:
    with TestClient(app) as client:
        resp = client.get("/business")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Business config not found"}


def test_health_and_metrics(client: TestClient) -> None:
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["ok"] is True
    client.get("/chat")
    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "spa_knowledge_chunks" in metrics.text
