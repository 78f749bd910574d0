"""
Tests for the SSE app's bearer authentication guard and connection registry.
"""
import time

import pytest
from starlette.testclient import TestClient

from hyperbrowser_mcp.auth import ApiKeyVerifier
from hyperbrowser_mcp.config import Settings
from hyperbrowser_mcp.transports import SessionRegistry, create_sse_app


class StaticVerifier(ApiKeyVerifier):
    """Accepts exactly one key without touching the network."""

    def __init__(self, valid_key: str):
        super().__init__(Settings())
        self.valid_key = valid_key
        self.calls = 0

    async def _fetch_status(self, api_key):
        self.calls += 1
        return 200 if api_key == self.valid_key else 401


@pytest.fixture
def verifier():
    return StaticVerifier("good-key")


@pytest.fixture
def auth_app(verifier):
    return create_sse_app(Settings(), require_auth=True, verifier=verifier)


class TestAuthGuard:

    def test_sse_without_header_rejected(self, auth_app, verifier):
        with TestClient(auth_app) as client:
            response = client.get("/sse")

        assert response.status_code == 401
        assert response.json()["error"] == "invalid_token"
        assert response.headers["www-authenticate"].startswith("Bearer")
        assert verifier.calls == 0

    def test_sse_with_bad_key_rejected(self, auth_app, verifier):
        with TestClient(auth_app) as client:
            response = client.get("/sse", headers={"Authorization": "Bearer wrong"})

        assert response.status_code == 401
        assert "Status: 401" in response.json()["error_description"]
        assert verifier.calls == 1

    def test_messages_with_bad_key_rejected(self, auth_app):
        with TestClient(auth_app) as client:
            response = client.post("/messages/?session_id=abc", json={}, headers={"Authorization": "Bearer wrong"})

        assert response.status_code == 401

    def test_messages_with_good_key_pass_guard(self, auth_app, verifier):
        with TestClient(auth_app) as client:
            response = client.post("/messages/", json={}, headers={"Authorization": "Bearer good-key"})
            client.post("/messages/", json={}, headers={"Authorization": "Bearer good-key"})

        assert response.status_code != 401
        assert verifier.calls == 1

    def test_messages_open_without_auth(self):
        app = create_sse_app(Settings(), require_auth=False, verifier=StaticVerifier("unused"))
        with TestClient(app) as client:
            response = client.post("/messages/", json={})

        assert response.status_code != 401

    def test_health(self, auth_app):
        with TestClient(auth_app) as client:
            response = client.get("/health")

        assert response.json() == {"status": "ok", "connections": 0}


class TestSessionRegistry:

    def test_open_and_close(self):
        registry = SessionRegistry()

        first = registry.open("key-a")
        second = registry.open(None)

        assert len(registry) == 2
        assert first.invocation.connection_id != second.invocation.connection_id
        assert first.invocation.credential == "key-a"
        assert second.invocation.credential is None

        closed = registry.close(first.invocation.connection_id)
        assert closed is first
        assert closed.opened_at <= time.time()
        assert len(registry) == 1
        assert registry.close(first.invocation.connection_id) is None

    def test_close_unknown_is_noop(self):
        registry = SessionRegistry()
        assert registry.close("missing") is None
        assert len(registry) == 0
