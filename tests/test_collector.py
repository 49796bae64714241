"""Tests for the collector API endpoints."""

import json
from urllib.parse import parse_qs, urlsplit

import pytest
from fastapi.testclient import TestClient

from src.collector.app import app


@pytest.fixture
def client(monkeypatch):
    """Test client with default settings coming from the environment."""
    monkeypatch.setenv("MATOMO_SITE_ID", "5")
    monkeypatch.setenv("MATOMO_ENDPOINT_URL", "https://matomo.test/")
    monkeypatch.delenv("MATOMO_AUTH_TOKEN", raising=False)
    monkeypatch.delenv("MATOMO_TRANSPORT", raising=False)
    with TestClient(app) as c:
        yield c


def _params(response) -> dict[str, list[str]]:
    return parse_qs(urlsplit(response.json()["url"]).query)


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestPageEndpoint:
    def test_page_request(self, client):
        payload = {
            "event": {
                "timestamp_millis": 42,
                "data": {"kind": "page", "title": "Homepage", "url": "https://example.com"},
            }
        }
        response = client.post("/page", json=payload)
        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "GET"
        assert data["forward_client_headers"] is True
        assert data["url"].startswith("https://matomo.test/matomo.php?")
        params = _params(response)
        assert params["action_name"] == ["Homepage"]
        assert params["rand"] == ["42"]

    def test_request_settings_override_environment(self, client):
        payload = {
            "event": {"data": {"kind": "page", "title": "Home"}},
            "settings": {"site_id": "9", "authentication_token": "tok"},
        }
        params = _params(client.post("/page", json=payload))
        assert params["idsite"] == ["9"]
        assert params["token_auth"] == ["tok"]

    def test_wrong_kind_is_422(self, client):
        payload = {"event": {"data": {"kind": "track", "name": "Clicked"}}}
        response = client.post("/page", json=payload)
        assert response.status_code == 422
        assert response.json()["detail"] == "Expected page data, got track"

    def test_invalid_kind_rejected(self, client):
        response = client.post("/page", json={"event": {"data": {"kind": "screen"}}})
        assert response.status_code == 422


class TestTrackEndpoint:
    def test_track_request(self, client):
        payload = {
            "event": {
                "data": {
                    "kind": "track",
                    "name": "Clicked",
                    "properties": {"track_key": "track_value"},
                },
                "context": {"session": {"first_seen": 0, "last_seen": 0}},
            }
        }
        params = _params(client.post("/track", json=payload))
        assert params["e_a"] == ["Clicked"]
        assert params["e_c"] == ["track"]
        assert json.loads(params["_cvar"][0])["1"] == ["track_key", "track_value"]

    def test_form_transport(self, client):
        payload = {
            "event": {"data": {"kind": "track", "name": "Clicked"}},
            "settings": {"transport": "form"},
        }
        data = client.post("/track", json=payload).json()
        assert data["method"] == "POST"
        assert data["url"] == "https://matomo.test/matomo.php"
        assert parse_qs(data["body"])["e_a"] == ["Clicked"]


class TestUserEndpoint:
    def test_anonymous_user(self, client):
        payload = {"event": {"data": {"kind": "user", "anonymous_id": "abc123"}}}
        params = _params(client.post("/user", json=payload))
        assert params["cid"] == ["616263313233"]


class TestCollectEndpoint:
    def test_dispatches_on_kind(self, client):
        payload = {"event": {"data": {"kind": "user", "user_id": "u-1"}}}
        params = _params(client.post("/collect", json=payload))
        assert params["uid"] == ["u-1"]


class TestConfiguration:
    def test_missing_settings_is_400(self, monkeypatch):
        monkeypatch.delenv("MATOMO_SITE_ID", raising=False)
        monkeypatch.delenv("MATOMO_ENDPOINT_URL", raising=False)
        with TestClient(app) as c:
            response = c.post("/page", json={"event": {"data": {"kind": "page"}}})
        assert response.status_code == 400
        assert "site_id" in response.json()["detail"]
