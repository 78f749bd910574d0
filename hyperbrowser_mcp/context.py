"""Who is invoking a tool, passed explicitly into every handler."""
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class StdioInvocation:
    """Local single-connection transport; carries no credential."""


@dataclass(frozen=True)
class NetworkInvocation:
    """SSE transport connection.

    ``credential`` is the verified bearer API key, or ``None`` when the server
    was started without authentication.
    """
    credential: Optional[str] = None
    connection_id: Optional[str] = None


Invocation = Union[StdioInvocation, NetworkInvocation]
