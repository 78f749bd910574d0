"""Async client for the Hyperbrowser REST API."""
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from .config import Settings
from .context import Invocation, NetworkInvocation
from .errors import HyperbrowserError, NoApiKeyError

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("completed", "failed")
CRAWL_BATCH_SIZE = 100


class HyperbrowserClient:
    """One API key, one short-lived client. A new HTTP session per request."""

    def __init__(self, api_key: str, settings: Optional[Settings] = None):
        self.api_key = api_key
        self.settings = settings or Settings()

        self.scrape = JobService(self, "/api/scrape")
        self.crawl = CrawlService(self, "/api/crawl")
        self.extract = JobService(self, "/api/extract")
        self.browser_use = JobService(self, "/api/task/browser-use")
        self.cua = JobService(self, "/api/task/cua")
        self.profiles = ProfileService(self)

    async def request(
            self,
            method: str,
            path: str,
            *,
            json_body: Optional[Dict[str, Any]] = None,
            params: Optional[Dict[str, Any]] = None
    ) -> Any:
        url = f"{self.settings.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        async with aiohttp.ClientSession(headers={"x-api-key": self.api_key}) as session:
            async with session.request(
                    method,
                    url,
                    json=json_body,
                    params=params,
                    timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout)
            ) as resp:
                text = await resp.text()
                body = _decode_body(text)
                if not 200 <= resp.status < 300:
                    message = _error_message(body) or resp.reason or "Unknown error"
                    raise HyperbrowserError(message, status_code=resp.status)
                return body


class JobService:
    """Endpoints following the start / status / fetch job pattern."""

    def __init__(self, client: HyperbrowserClient, path: str):
        self._client = client
        self.path = path

    async def start(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return await self._client.request("POST", self.path, json_body=params)

    async def get(self, job_id: str, **query) -> Dict[str, Any]:
        return await self._client.request("GET", f"{self.path}/{job_id}", params=query or None)

    async def get_status(self, job_id: str) -> str:
        resp = await self._client.request("GET", f"{self.path}/{job_id}/status")
        return resp.get("status", "")

    async def wait(self, job_id: str) -> str:
        settings = self._client.settings
        attempts = 0
        while True:
            status = await self.get_status(job_id)
            if status in TERMINAL_STATUSES:
                return status
            attempts += 1
            if settings.max_poll_attempts and attempts >= settings.max_poll_attempts:
                raise HyperbrowserError(f"Job {job_id} did not finish after {attempts} status checks")
            await asyncio.sleep(settings.poll_interval)

    async def start_and_wait(self, params: Dict[str, Any]) -> Dict[str, Any]:
        job = await self.start(params)
        job_id = job["jobId"]
        logger.info(f"Started job {job_id} at {self.path}")
        await self.wait(job_id)
        return await self.get(job_id)


class CrawlService(JobService):
    """Crawl results are paged; ``start_and_wait`` returns every page."""

    async def start_and_wait(self, params: Dict[str, Any]) -> Dict[str, Any]:
        job = await self.start(params)
        job_id = job["jobId"]
        logger.info(f"Started crawl job {job_id}")
        await self.wait(job_id)

        first = await self.get(job_id, page=1, batchSize=CRAWL_BATCH_SIZE)
        pages: List[Dict[str, Any]] = list(first.get("data") or [])
        total_batches = first.get("totalPageBatches") or 1
        for batch in range(2, total_batches + 1):
            resp = await self.get(job_id, page=batch, batchSize=CRAWL_BATCH_SIZE)
            pages.extend(resp.get("data") or [])

        first["data"] = pages
        return first


class ProfileService:

    def __init__(self, client: HyperbrowserClient):
        self._client = client

    async def create(self) -> Dict[str, Any]:
        return await self._client.request("POST", "/api/profile")

    async def delete(self, profile_id: str) -> Dict[str, Any]:
        return await self._client.request("DELETE", f"/api/profile/{profile_id}")

    async def list(self, page: Optional[int] = None, limit: Optional[int] = None) -> Dict[str, Any]:
        return await self._client.request("GET", "/api/profiles", params={"page": page, "limit": limit})


def _decode_body(text: str) -> Any:
    if not text:
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return {"message": text}


def _error_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        return body.get("message") or body.get("error")
    return None


# ========== Client factory ==========

class ClientFactory:
    """Resolves the API key for an invocation and builds a fresh client.

    Order: explicit per-call key, then the verified network credential, then
    the key configured for the process.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def resolve_api_key(self, explicit_key: Optional[str], invocation: Optional[Invocation]) -> str:
        if explicit_key:
            return explicit_key
        if isinstance(invocation, NetworkInvocation) and invocation.credential:
            return invocation.credential
        if self.settings.api_key:
            return self.settings.api_key
        raise NoApiKeyError()

    def create(self, explicit_key: Optional[str] = None, invocation: Optional[Invocation] = None) -> HyperbrowserClient:
        return HyperbrowserClient(self.resolve_api_key(explicit_key, invocation), self.settings)
