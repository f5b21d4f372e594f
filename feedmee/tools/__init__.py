"""MCP tools for feedmee."""
