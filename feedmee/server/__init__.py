"""MCP server package initialization"""

from feedmee.server.app import create_mcp_server, main

__all__ = ["create_mcp_server", "main"]
