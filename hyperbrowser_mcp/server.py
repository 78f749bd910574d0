"""MCP server assembly, independent of the transport that mounts it."""
import logging
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server.lowlevel import Server
from mcp.shared.exceptions import McpError
from pydantic import ValidationError

from . import resources
from .client import ClientFactory
from .config import NAME, VERSION, Settings
from .context import Invocation, StdioInvocation
from .errors import ResourceNotFoundError
from .tools import create_hyperbrowser_tools

logger = logging.getLogger(__name__)

RESOURCE_NOT_FOUND = -32002


class HyperbrowserMCPServer:
    """Low-level MCP server bound to one invocation context.

    Each connection gets its own instance so that handlers always receive the
    context of the connection they were called on.
    """

    def __init__(self, invocation: Optional[Invocation] = None, name: str = NAME, version: str = VERSION):
        self.name = name
        self.invocation = invocation or StdioInvocation()
        self.server = Server(name, version=version)
        self._tools: List[Dict[str, Any]] = []

        self._setup_handlers()

    def _setup_handlers(self):
        """Setup MCP protocol handlers"""

        @self.server.list_tools()
        async def list_tools() -> List[types.Tool]:
            return [
                types.Tool(
                    name=tool['name'],
                    description=tool['description'],
                    inputSchema=tool['schema']
                )
                for tool in self._tools
            ]

        @self.server.list_resources()
        async def list_resources() -> List[types.Resource]:
            return resources.list_resources()

        # Registered directly: results must keep isError alongside partial content
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool
        self.server.request_handlers[types.ReadResourceRequest] = self._handle_read_resource

    def register_tools(self, tools: List[Dict[str, Any]]):
        """Register tool configurations"""
        self._tools.extend(tools)
        logger.debug(f"Registered {len(tools)} tools: {[t['name'] for t in tools]}")

    @property
    def tool_names(self) -> List[str]:
        return [t['name'] for t in self._tools]

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]]) -> types.CallToolResult:
        tool = next((t for t in self._tools if t['name'] == name), None)
        if not tool:
            raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message=f"Unknown tool: {name}"))

        logger.info(f"Calling tool {name}")
        try:
            result = await tool['handler'](self.invocation, arguments or {})
        except ValidationError as e:
            logger.info(f"Rejected arguments for {name}: {e.error_count()} error(s)")
            raise McpError(types.ErrorData(
                code=types.INVALID_PARAMS,
                message=f"Invalid arguments for tool {name}: {e}"
            )) from e

        if result.isError:
            logger.warning(f"Tool {name} returned an error result")
        return result

    def read_resource(self, uri: str) -> types.ReadResourceResult:
        try:
            resource = resources.get_resource(uri)
        except ResourceNotFoundError as e:
            raise McpError(types.ErrorData(code=RESOURCE_NOT_FOUND, message=str(e))) from e

        return types.ReadResourceResult(contents=[
            types.TextResourceContents(
                uri=resource['uri'],
                mimeType=resource['mimeType'],
                text=resource['text']
            )
        ])

    async def _handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        result = await self.call_tool(req.params.name, req.params.arguments)
        return types.ServerResult(result)

    async def _handle_read_resource(self, req: types.ReadResourceRequest) -> types.ServerResult:
        return types.ServerResult(self.read_resource(str(req.params.uri)))

    def initialization_options(self):
        return self.server.create_initialization_options()


def build_server(settings: Settings, invocation: Optional[Invocation] = None) -> HyperbrowserMCPServer:
    """Server with every Hyperbrowser tool and the static resources."""
    server = HyperbrowserMCPServer(invocation)
    server.register_tools(create_hyperbrowser_tools(ClientFactory(settings)))
    return server
