"""
API tests for the reconciliation endpoints.
"""
import pytest
from fastapi.testclient import TestClient

from conftest import FakeProvider, drugsfda_payload
from medrecon.engine import ReconciliationEngine
from medrecon.main import app
from medrecon.providers import registry
from medrecon.routes.reconcile import get_engine


@pytest.fixture
def client():
    engine = ReconciliationEngine(
        providers=[FakeProvider(registry.FDA_DRUGS, payload=drugsfda_payload())],
        deadline=5,
    )
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_health_lists_providers(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["providers"][registry.RXNORM] == "RxNorm"
    assert len(body["providers"]) == 10


def test_reconcile_analysis(client, prinivil_analysis):
    response = client.post("/reconcile", json=prinivil_analysis)
    assert response.status_code == 200

    body = response.json()
    assert body["kind"] == "verified"
    assert body["identification"]["brand_name"]["value"] == "Prinivil"
    assert body["identification"]["ndc"]["value"] == "0006-0019-54"
    assert body["quality"]["verification_level"] in ("gold", "silver", "bronze", "basic")
    assert body["source_attribution"][0]["provider"] == registry.FDA_DRUGS
    assert body["disclaimer"].startswith("IMPORTANT MEDICAL DISCLAIMER")


def test_reconcile_seed(client):
    response = client.post("/reconcile/seed", json={"brand_name": "Prinivil", "strength": "10 mg"})
    assert response.status_code == 200
    body = response.json()
    assert body["kind"] == "verified"
    assert body["regulatory"]["application_number"] == "NDA019558"


def test_reconcile_seed_rejects_bad_confidence(client):
    response = client.post("/reconcile/seed", json={"brand_name": "Prinivil", "initial_confidence": 42})
    assert response.status_code == 422


def test_minimal_profile_is_returned_with_200(client, monkeypatch):
    from medrecon.engine import pipeline

    def explode(sources):
        raise RuntimeError("boom")

    monkeypatch.setattr(pipeline, "collect_observations", explode)
    response = client.post("/reconcile/seed", json={"brand_name": "Prinivil"})

    assert response.status_code == 200
    body = response.json()
    assert body["kind"] == "minimal"
    assert body["brand_name"] == "Prinivil"
    assert body["verified"] is False


def test_out_of_range_confidence_is_tolerated(client):
    response = client.post(
        "/reconcile",
        content='{"confidence": 1e400, "medicine": {"brandName": "Prinivil"}}',
        headers={"content-type": "application/json"},
    )
    assert response.status_code == 200
    assert response.json()["kind"] == "verified"
