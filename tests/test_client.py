"""
Tests for configuration, API key resolution and the job polling client.
"""
from unittest.mock import AsyncMock

import pytest

from hyperbrowser_mcp.client import ClientFactory, HyperbrowserClient
from hyperbrowser_mcp.config import DEFAULT_BASE_URL, Settings
from hyperbrowser_mcp.context import NetworkInvocation, StdioInvocation
from hyperbrowser_mcp.errors import HyperbrowserError, NoApiKeyError


class TestSettings:

    def test_first_env_name_wins(self):
        settings = Settings.from_env({"HB_API_KEY": "hb", "HYPERBROWSER_API_KEY": "long"})
        assert settings.api_key == "hb"

    def test_second_env_name_honored(self):
        settings = Settings.from_env({"HYPERBROWSER_API_KEY": "long"})
        assert settings.api_key == "long"

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.api_key is None
        assert settings.base_url == DEFAULT_BASE_URL

    def test_base_url_trailing_slash_stripped(self):
        settings = Settings.from_env({"HYPERBROWSER_BASE_URL": "http://localhost:8080/"})
        assert settings.base_url == "http://localhost:8080"


class TestClientFactory:

    def test_explicit_key_first(self):
        factory = ClientFactory(Settings(api_key="env"))
        assert factory.resolve_api_key("call", NetworkInvocation(credential="conn")) == "call"

    def test_network_credential_second(self):
        factory = ClientFactory(Settings(api_key="env"))
        assert factory.resolve_api_key(None, NetworkInvocation(credential="conn")) == "conn"

    def test_stdio_falls_back_to_settings(self):
        factory = ClientFactory(Settings(api_key="env"))
        assert factory.resolve_api_key(None, StdioInvocation()) == "env"

    def test_unauthenticated_network_falls_back_to_settings(self):
        factory = ClientFactory(Settings(api_key="env"))
        assert factory.resolve_api_key(None, NetworkInvocation()) == "env"

    def test_no_key_anywhere(self):
        factory = ClientFactory(Settings(api_key=None))
        with pytest.raises(NoApiKeyError):
            factory.create(None, StdioInvocation())

    def test_new_client_per_call(self):
        factory = ClientFactory(Settings(api_key="env"))
        first = factory.create()
        second = factory.create()
        assert first is not second
        assert first.api_key == "env"


class TestJobPolling:

    @pytest.mark.asyncio
    async def test_start_and_wait_polls_until_completed(self, monkeypatch):
        client = HyperbrowserClient("key", Settings(poll_interval=0))
        request = AsyncMock(side_effect=[
            {"jobId": "job-1"},
            {"status": "pending"},
            {"status": "running"},
            {"status": "completed"},
            {"jobId": "job-1", "status": "completed", "data": {"markdown": "hi"}},
        ])
        monkeypatch.setattr(client, "request", request)

        result = await client.scrape.start_and_wait({"url": "https://example.com"})

        assert result["data"] == {"markdown": "hi"}
        paths = [call.args[1] for call in request.await_args_list]
        assert paths == [
            "/api/scrape",
            "/api/scrape/job-1/status",
            "/api/scrape/job-1/status",
            "/api/scrape/job-1/status",
            "/api/scrape/job-1",
        ]

    @pytest.mark.asyncio
    async def test_failed_job_returns_error_payload(self, monkeypatch):
        client = HyperbrowserClient("key", Settings(poll_interval=0))
        monkeypatch.setattr(client, "request", AsyncMock(side_effect=[
            {"jobId": "job-2"},
            {"status": "failed"},
            {"jobId": "job-2", "status": "failed", "error": "Blocked by site"},
        ]))

        result = await client.extract.start_and_wait({"urls": [], "prompt": "p"})

        assert result["error"] == "Blocked by site"

    @pytest.mark.asyncio
    async def test_poll_limit(self, monkeypatch):
        client = HyperbrowserClient("key", Settings(poll_interval=0, max_poll_attempts=2))
        monkeypatch.setattr(client, "request", AsyncMock(side_effect=[
            {"jobId": "job-3"},
            {"status": "running"},
            {"status": "running"},
        ]))

        with pytest.raises(HyperbrowserError):
            await client.browser_use.start_and_wait({"task": "t"})

    @pytest.mark.asyncio
    async def test_crawl_merges_batches(self, monkeypatch):
        client = HyperbrowserClient("key", Settings(poll_interval=0))
        request = AsyncMock(side_effect=[
            {"jobId": "c1"},
            {"status": "completed"},
            {"jobId": "c1", "status": "completed", "data": [{"url": "a"}], "totalPageBatches": 2},
            {"jobId": "c1", "status": "completed", "data": [{"url": "b"}], "totalPageBatches": 2},
        ])
        monkeypatch.setattr(client, "request", request)

        result = await client.crawl.start_and_wait({"url": "https://example.com"})

        assert [page["url"] for page in result["data"]] == ["a", "b"]
        assert request.await_args_list[3].kwargs["params"]["page"] == 2
