"""FastMCP server setup for Exa.

The active capability set is computed once from the run-time config and
passed explicitly to the registrars; nothing about tool enablement is global.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from exa_mcp.core.capabilities import CAPABILITIES, compute_active_set, get_descriptor
from exa_mcp.core.client import ExaClient
from exa_mcp.core.config import ExaMCPConfig
from exa_mcp.core.constants import SERVER_NAME
from exa_mcp.core.request_log import configure_logging
from exa_mcp.mcp.registrars import register_capabilities, register_prompts, register_resources
from exa_mcp.mcp.tools import CapabilityHandlers

if TYPE_CHECKING:
    from collections.abc import Sequence

    from mcp.types import ToolAnnotations

logger = logging.getLogger(__name__)


def _build_server_instructions(active: Sequence[str]) -> str:
    """Describe the enabled tools for connecting clients."""
    lines = [
        "Exa provides real-time web search, code context, crawling, and research tools.",
        "",
        "Enabled tools:",
    ]
    for capability_id in active:
        descriptor = get_descriptor(capability_id)
        if descriptor is not None:
            lines.append(f"- {descriptor.id}: {descriptor.description}")
    if "deep_researcher_start" in active:
        lines.extend(
            [
                "",
                "Deep research runs in two phases: deep_researcher_start returns a task id,",
                "then call deep_researcher_check with it until the status is completed.",
            ]
        )
    return "\n".join(lines)


def _create_mcp_server(
    config: ExaMCPConfig | None = None,
    *,
    client: ExaClient | None = None,
) -> FastMCP:
    """Create a FastMCP instance exposing the configured capabilities."""
    config = config if config is not None else ExaMCPConfig()
    active = compute_active_set(config, CAPABILITIES)
    if config.debug:
        logger.info("Starting Exa MCP server in debug mode")
        if config.enabled_capabilities:
            logger.info("Enabled tools from config: %s", ", ".join(config.enabled_capabilities))
            unknown = [
                tool_id
                for tool_id in config.enabled_capabilities
                if get_descriptor(tool_id) is None
            ]
            if unknown:
                logger.info("Ignoring unknown tools: %s", ", ".join(unknown))

    handlers = CapabilityHandlers(client if client is not None else ExaClient(config.api_key))
    mcp = FastMCP(SERVER_NAME, instructions=_build_server_instructions(active))
    registered = register_capabilities(mcp, active, handlers, debug=config.debug)
    register_prompts(mcp)
    register_resources(mcp, registered)
    return mcp


def list_registered_tool_names(mcp: FastMCP) -> set[str]:
    """Return registered MCP tool names for contract tests and diagnostics."""
    return {tool.name for tool in mcp._tool_manager.list_tools()}


def get_registered_tool_annotations(mcp: FastMCP) -> dict[str, ToolAnnotations | None]:
    """Return tool annotation metadata keyed by tool name."""
    return {tool.name: tool.annotations for tool in mcp._tool_manager.list_tools()}


def main(config: ExaMCPConfig | None = None) -> None:
    """Entry point for the exa-mcp serve command."""
    config = config if config is not None else ExaMCPConfig()
    configure_logging(config.debug)
    mcp = _create_mcp_server(config)
    logger.info("Exa MCP server initialized")
    mcp.run(transport="stdio")
