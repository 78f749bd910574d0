"""MCP server exposing Hyperbrowser cloud browser tools."""
from .config import NAME, VERSION, Settings
from .server import HyperbrowserMCPServer, build_server

__all__ = ["NAME", "VERSION", "Settings", "HyperbrowserMCPServer", "build_server"]
