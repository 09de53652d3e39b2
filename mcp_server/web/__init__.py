"""HTTP and WebSocket surface of the MCP server."""

from mcp_server.web.app import create_app

__all__ = ["create_app"]
