"""stdio and SSE transports for the Hyperbrowser MCP server."""
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

import uvicorn
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route
from starlette.types import Receive, Scope, Send

from .auth import ApiKeyVerifier, AuthInfo, extract_bearer_token
from .config import Settings
from .context import NetworkInvocation, StdioInvocation
from .errors import InvalidTokenError
from .server import build_server

logger = logging.getLogger(__name__)

MESSAGES_PATH = "/messages/"


# ========== stdio ==========

async def run_stdio(settings: Settings):
    """Serve a single connection over stdin/stdout until it closes."""
    mcp_server = build_server(settings, StdioInvocation())
    async with stdio_server() as (read_stream, write_stream):
        logger.info(f"{mcp_server.name} MCP Server running on stdio")
        await mcp_server.server.run(read_stream, write_stream, mcp_server.initialization_options())


# ========== SSE ==========

@dataclass
class Connection:
    invocation: NetworkInvocation
    opened_at: float = field(default_factory=time.time)


class SessionRegistry:
    """Open SSE connections keyed by connection id."""

    def __init__(self):
        self._connections: Dict[str, Connection] = {}

    def open(self, credential: Optional[str]) -> Connection:
        connection_id = uuid.uuid4().hex
        connection = Connection(NetworkInvocation(credential=credential, connection_id=connection_id))
        self._connections[connection_id] = connection
        return connection

    def close(self, connection_id: str) -> Optional[Connection]:
        return self._connections.pop(connection_id, None)

    def __len__(self) -> int:
        return len(self._connections)


def unauthorized(message: str) -> JSONResponse:
    return JSONResponse(
        {"error": "invalid_token", "error_description": message},
        status_code=401,
        headers={"WWW-Authenticate": f'Bearer error="invalid_token", error_description="{message}"'},
    )


def create_sse_app(
        settings: Settings,
        require_auth: bool = False,
        verifier: Optional[ApiKeyVerifier] = None,
        registry: Optional[SessionRegistry] = None
) -> Starlette:
    """ASGI app exposing ``GET /sse`` and ``POST /messages/``.

    With ``require_auth`` both endpoints need ``Authorization: Bearer <api key>``
    and the verified key becomes the connection's credential.
    """
    sse = SseServerTransport(MESSAGES_PATH)
    verifier = verifier or ApiKeyVerifier(settings)
    registry = registry if registry is not None else SessionRegistry()

    async def authenticate(request: Request) -> AuthInfo:
        token = extract_bearer_token(request.headers.get("authorization"))
        return await verifier.verify(token)

    async def handle_sse(request: Request) -> Response:
        credential = None
        if require_auth:
            try:
                credential = (await authenticate(request)).token
            except InvalidTokenError as e:
                logger.warning(f"Rejected SSE connection: {e}")
                return unauthorized(str(e))

        connection = registry.open(credential)
        connection_id = connection.invocation.connection_id
        logger.info(f"SSE connection {connection_id} opened ({len(registry)} active)")
        try:
            async with sse.connect_sse(request.scope, request.receive, request._send) as (read_stream, write_stream):
                mcp_server = build_server(settings, connection.invocation)
                await mcp_server.server.run(read_stream, write_stream, mcp_server.initialization_options())
        finally:
            closed = registry.close(connection_id)
            if closed is not None:
                logger.info(f"SSE connection {connection_id} closed after {time.time() - closed.opened_at:.1f}s")
        return Response()

    async def handle_messages(scope: Scope, receive: Receive, send: Send):
        if require_auth:
            try:
                await authenticate(Request(scope, receive))
            except InvalidTokenError as e:
                logger.warning(f"Rejected message post: {e}")
                await unauthorized(str(e))(scope, receive, send)
                return
        await sse.handle_post_message(scope, receive, send)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "connections": len(registry)})

    app = Starlette(
        debug=False,
        routes=[
            Route("/health", endpoint=health),
            Route("/sse", endpoint=handle_sse),
            Mount(MESSAGES_PATH, app=handle_messages),
        ],
    )
    app.state.registry = registry
    return app


def run_sse(settings: Settings, host: str, port: int, require_auth: bool = False, log_level: str = "info"):
    if require_auth:
        logger.info("SSE Authentication is ENABLED (flags --sse and --serve are present).")
    else:
        logger.info("SSE Authentication is DISABLED (flags --sse and --serve are not both present).")

    app = create_sse_app(settings, require_auth=require_auth)
    logger.info(f"Listening on http://{host}:{port}/sse")
    uvicorn.run(app, host=host, port=port, log_level=log_level)
