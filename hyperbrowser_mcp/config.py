"""Process configuration read from the environment."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

NAME = "hyperbrowser"
VERSION = "1.1.0"

DEFAULT_BASE_URL = "https://app.hyperbrowser.ai"
DEFAULT_PORT = 3010

# Checked in order, first non-empty value wins
API_KEY_ENV_VARS = ("HB_API_KEY", "HYPERBROWSER_API_KEY")


@dataclass(frozen=True)
class Settings:
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    poll_interval: float = 2.0
    max_poll_attempts: int = 0
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        api_key = next((env[name] for name in API_KEY_ENV_VARS if env.get(name)), None)
        return cls(
            api_key=api_key,
            base_url=env.get("HYPERBROWSER_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            poll_interval=float(env.get("HYPERBROWSER_POLL_INTERVAL", 2.0)),
            max_poll_attempts=int(env.get("HYPERBROWSER_MAX_POLL_ATTEMPTS", 0)),
            request_timeout=float(env.get("HYPERBROWSER_TIMEOUT", 30.0)),
        )
