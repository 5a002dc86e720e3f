"""MCP server entry point for Exa."""

from __future__ import annotations

from exa_mcp.mcp.server import main
from exa_mcp.mcp.tools import CapabilityHandlers

__all__ = ["CapabilityHandlers", "main"]
