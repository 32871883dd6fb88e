"""Tests for the HTTP API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import TEST_DAY, make_entry, make_payload, request_source_id
from epgsync.main import create_app


def handler(request: httpx.Request) -> httpx.Response:
    source_id = request_source_id(request)
    if source_id == "114":
        return httpx.Response(200, content=make_payload(None, state=403, message="quota exceeded"))
    return httpx.Response(200, content=make_payload({
        TEST_DAY: [make_entry(f"{TEST_DAY} 06:00:00", f"{TEST_DAY} 07:00:00", f"news-{source_id}")]
    }))


@pytest.fixture
def client(make_provider):
    provider = make_provider(handler)
    with TestClient(create_app(providers=[provider])) as test_client:
        yield test_client


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["providers"] == ["hebei"]


def test_list_providers(client):
    response = client.get("/providers")

    assert response.status_code == 200
    provider = response.json()[0]
    assert provider["id"] == "hebei"
    assert provider["source_timezone"] == "Asia/Shanghai"
    assert len(provider["channels"]) == 7


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "providers": {"hebei": {"healthy": True, "message": "OK"}}}


def test_fetch_returns_partial_results(client):
    response = client.post("/epg/fetch", json={
        "provider": "Hebei",
        "date": TEST_DAY,
        "channels": [
            {"provider_channel_id": "462", "channel_id": "hebei-1"},
            {"provider_channel_id": "114", "channel_id": "hebei-2"},
            {"provider_channel_id": "118", "channel_id": "hebei-3"},
        ],
    })

    assert response.status_code == 200
    body = response.json()
    assert body["channels_requested"] == 3
    assert body["channels_succeeded"] == 2
    assert body["total_programs"] == 2
    assert body["programs"][0]["start_time"] == "2024-01-09T22:00:00+00:00"
    assert body["failures"][0]["channel_id"] == "hebei-2"
    assert body["failures"][0]["error_type"] == "ProviderAPIError"
    assert "quota exceeded" in body["failures"][0]["error"]


def test_fetch_defaults_to_catalog(client):
    response = client.post("/epg/fetch", json={"provider": "hebei", "date": TEST_DAY})

    assert response.status_code == 200
    assert response.json()["channels_requested"] == 7
    assert response.json()["channels_succeeded"] == 6


def test_fetch_unknown_provider(client):
    response = client.post("/epg/fetch", json={"provider": "nowhere", "date": TEST_DAY})

    assert response.status_code == 404


def test_fetch_invalid_date(client):
    response = client.post("/epg/fetch", json={"provider": "hebei", "date": "10/01/2024"})

    assert response.status_code == 422


def test_sync(client):
    response = client.post("/sync", params={"days": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["providers_processed"] == 1
    assert body["provider_details"][0]["channels_failed"] == 1
