"""MCP server command."""

from __future__ import annotations

import tomllib
from pathlib import Path

import click
from pydantic import ValidationError

from exa_mcp.core.config import ExaMCPConfig
from exa_mcp.core.constants import EXA_API_KEY_ENV


def load_cli_config(
    config_path: Path | None,
    *,
    api_key: str | None = None,
    tools: str | None = None,
    debug: bool = False,
) -> ExaMCPConfig:
    """Merge an optional TOML file with CLI overrides, reporting problems as usage errors."""
    try:
        return ExaMCPConfig.load(
            config_path,
            exa_api_key=api_key,
            tools=tools,
            debug=True if debug else None,
        )
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise click.BadParameter(f"Cannot read config file: {exc}", param_hint="--config") from exc
    except ValidationError as exc:
        raise click.BadParameter(f"Invalid configuration: {exc}") from exc


@click.command()
@click.option(
    "--api-key",
    envvar=EXA_API_KEY_ENV,
    default=None,
    help=f"Exa API key (defaults to ${EXA_API_KEY_ENV})",
)
@click.option(
    "--tools",
    default=None,
    help="Comma-separated tool ids to enable (defaults to web_search_exa,get_code_context_exa)",
)
@click.option("--debug", is_flag=True, default=False, help="Enable debug logging to stderr")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML config file with exa_api_key/tools/debug keys",
)
def serve(api_key: str | None, tools: str | None, debug: bool, config_path: Path | None) -> None:
    """Run the Exa MCP server (STDIO transport).

    This command is typically invoked by MCP clients (Claude Desktop, Cursor,
    etc.) rather than run by hand.
    """
    config = load_cli_config(config_path, api_key=api_key, tools=tools, debug=debug)

    from exa_mcp.mcp.server import main as mcp_main

    mcp_main(config)
