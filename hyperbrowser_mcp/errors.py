"""Exception types shared across the server."""
from typing import Optional


class HyperbrowserError(Exception):
    """Raised when the Hyperbrowser API answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NoApiKeyError(Exception):
    """No API key from the call, the connection or the environment."""

    def __init__(self, message: str = "No API key provided or found in environment variables"):
        super().__init__(message)


class InvalidTokenError(Exception):
    """Bearer credential missing, rejected, or could not be verified."""


class ResourceNotFoundError(Exception):
    pass


class SchemaParseError(ValueError):
    pass
