"""Hevy MCP server transports.

Serves the Hevy MCP tools over stdio, over HTTP with Server-Sent Events, or
both at once.

Usage:
    # Start the server (transport from TRANSPORT, default stdio)
    hevy-mcp-server

    # HTTP transport only
    hevy-mcp-server --transport sse --port 3000
"""

from .config import ServerSettings, get_settings, load_settings

__all__ = [
    "ServerSettings",
    "get_settings",
    "load_settings",
]
