"""
Shared fixtures: settings and a client factory that hands out a mocked backend.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest

from hyperbrowser_mcp.client import ClientFactory
from hyperbrowser_mcp.config import Settings
from hyperbrowser_mcp.context import StdioInvocation


class FakeClientFactory(ClientFactory):
    """Resolves keys like the real factory but returns one shared mock client."""

    def __init__(self, settings: Settings, client):
        super().__init__(settings)
        self.client = client
        self.resolved_keys = []

    def create(self, explicit_key=None, invocation=None):
        key = self.resolve_api_key(explicit_key, invocation)
        self.resolved_keys.append(key)
        return self.client


@pytest.fixture
def settings():
    return Settings(api_key="env-key", base_url="https://hb.test", poll_interval=0)


@pytest.fixture
def fake_client():
    client = MagicMock()
    for name in ("scrape", "crawl", "extract", "browser_use", "cua"):
        getattr(client, name).start_and_wait = AsyncMock()
    client.profiles.create = AsyncMock()
    client.profiles.delete = AsyncMock()
    client.profiles.list = AsyncMock()
    return client


@pytest.fixture
def clients(settings, fake_client):
    return FakeClientFactory(settings, fake_client)


@pytest.fixture
def keyless_clients(fake_client):
    return FakeClientFactory(Settings(api_key=None), fake_client)


@pytest.fixture
def stdio():
    return StdioInvocation()
