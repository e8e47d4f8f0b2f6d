"""
Tests for the HTTP API (FastAPI TestClient).
"""

import pytest
from fastapi.testclient import TestClient

from bidfinder.api import server
from bidfinder.core.errors import UpstreamUnavailableError
from bidfinder.search.web_search import SearchToolResponse
from conftest import StubWebSearch


LA_CSV = (
    "Bid Number,Bid Title,Department,Closing Date,Commodity Code\n"
    'RFP-1,Mental Health Outreach,Mental Health,12/31/2099 5:00 PM,="624190"\n'
    "RFP-2,Road Repair,Public Works,Continuous,\n"
)


@pytest.fixture
def web():
    return StubWebSearch(SearchToolResponse(structured_items=[{
        "title": "RFP: Drone Bridge Inspection Services",
        "url": "https://dot.example.gov/rfp/42",
        "snippet": "",
    }]))


@pytest.fixture
def client(store, web):
    server.app.dependency_overrides[server.get_store] = lambda: store
    server.app.dependency_overrides[server.get_web_search] = lambda: web
    yield TestClient(server.app)
    server.app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_import_then_search_catalog(client, web):
    response = client.post("/import", json={"source": "la_county", "csvData": LA_CSV})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["imported"] == 2
    assert body["deactivated"] == 0

    response = client.post("/search", json={
        "query": "mental health",
        "naicsCodes": [{"code": "624190", "label": "Social Services"}],
        "certifications": ["mbe"],
        "geographicPreference": "county",
        "location": {"county": "Los Angeles", "state": "CA"},
    })
    assert response.status_code == 200
    body = response.json()
    assert body["searchMethod"] == "database"
    assert body["searchedAreas"] == ["Federal (SAM.gov, Grants.gov)", "CA State", "Los Angeles County"]
    assert body["count"] == 1
    top = body["opportunities"][0]
    assert top["title"] == "Mental Health Outreach"
    assert top["fromDatabase"] is True
    assert top["matchLevel"] == "high"
    assert top["dueDate"].startswith("2099-12-31T17:00:00")
    assert web.prompts == []


def test_search_web_fallback(client):
    response = client.post("/search", json={"query": "drone inspection services", "naicsCodes": ["541330"]})
    assert response.status_code == 200
    body = response.json()
    assert body["searchMethod"] == "web"
    assert body["count"] == 1
    assert body["opportunities"][0]["fromDatabase"] is False


def test_reimport_deactivates(client):
    client.post("/import", json={"source": "la_county", "csvData": LA_CSV})
    smaller = LA_CSV.splitlines()[0] + "\n" + LA_CSV.splitlines()[2] + "\n"
    response = client.post("/import", json={"source": "la_county", "csvData": smaller})
    assert response.json()["deactivated"] == 1


@pytest.mark.parametrize("payload", [{}, {"query": ""}, {"query": "   "}])
def test_search_missing_query_is_400(client, payload):
    response = client.post("/search", json=payload)
    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.parametrize("payload", [
    {"source": "la_county"},
    {"csvData": LA_CSV},
    {"source": "la_county", "csvData": "Bid Number,Bid Title\n"},
])
def test_import_bad_input_is_400(client, payload):
    response = client.post("/import", json=payload)
    assert response.status_code == 400


def test_upstream_failure_is_502(client, web):
    web.error = UpstreamUnavailableError("connection reset")
    response = client.post("/search", json={"query": "drone inspection"})
    assert response.status_code == 502
    assert response.json() == {"error": "Service temporarily unavailable"}


def test_import_failure_is_500(client, store, monkeypatch):
    def broken_upsert(records, conn=None):
        raise RuntimeError("disk full")

    monkeypatch.setattr(store, "upsert", broken_upsert)
    response = client.post("/import", json={"source": "la_county", "csvData": LA_CSV})
    assert response.status_code == 500
    assert response.json()["source"] == "la_county"


def test_missing_api_key_disables_web_search_once(monkeypatch):
    attempts = []

    def no_key():
        attempts.append(1)
        raise ValueError("OPENAI_API_KEY environment variable not set")

    monkeypatch.setattr(server, "OpenAIWebSearch", no_key)
    monkeypatch.setattr(server, "_web_search", None)
    monkeypatch.setattr(server, "_web_search_disabled", False)

    assert server.get_web_search() is None
    assert server.get_web_search() is None
    assert len(attempts) == 1
