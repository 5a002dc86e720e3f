"""Exa MCP: web search, code context, and deep research tools for MCP clients."""

__version__ = "3.1.0"

__all__ = ["__version__"]
