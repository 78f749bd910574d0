"""Bearer API key verification for the SSE transport."""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import aiohttp

from .config import Settings
from .errors import InvalidTokenError

logger = logging.getLogger(__name__)

API_KEY_VALIDATION_CACHE_SECONDS = 5 * 60


@dataclass(frozen=True)
class AuthInfo:
    token: str


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise InvalidTokenError("Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidTokenError("Invalid Authorization header format, expected 'Bearer TOKEN'")
    return token.strip()


class ApiKeyVerifier:
    """Validates API keys against ``/api/me``, caching successes.

    A positive result is trusted for ``ttl`` seconds and expires lazily on the
    next lookup. Any failed validation drops the key from the cache.
    """

    def __init__(
            self,
            settings: Settings,
            ttl: float = API_KEY_VALIDATION_CACHE_SECONDS,
            clock: Callable[[], float] = time.monotonic
    ):
        self.settings = settings
        self.ttl = ttl
        self._clock = clock
        self._validated: Dict[str, float] = {}

    async def verify(self, api_key: str) -> AuthInfo:
        if not api_key:
            raise InvalidTokenError("API key is missing")

        validated_at = self._validated.get(api_key)
        if validated_at is not None:
            if self._clock() - validated_at < self.ttl:
                return AuthInfo(token=api_key)
            del self._validated[api_key]

        try:
            status = await self._fetch_status(api_key)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._validated.pop(api_key, None)
            logger.warning(f"API key validation request failed: {e}")
            raise InvalidTokenError("Error during API key validation") from e

        if status != 200:
            self._validated.pop(api_key, None)
            raise InvalidTokenError(f"Invalid API key or validation service error (Status: {status})")

        self._validated[api_key] = self._clock()
        return AuthInfo(token=api_key)

    async def _fetch_status(self, api_key: str) -> int:
        async with aiohttp.ClientSession() as session:
            async with session.get(
                    f"{self.settings.base_url}/api/me",
                    headers={"x-api-key": api_key},
                    timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout)
            ) as resp:
                return resp.status
