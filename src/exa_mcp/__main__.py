"""CLI entry point for Exa MCP."""

from __future__ import annotations

import click

from exa_mcp.cli.commands.serve import serve
from exa_mcp.cli.commands.tools import tools_cmd
from exa_mcp.version import get_exa_mcp_version


@click.group()
@click.version_option(version=get_exa_mcp_version(), prog_name="exa-mcp")
def cli() -> None:
    """Exa search and research tools over the Model Context Protocol."""


cli.add_command(serve)
cli.add_command(tools_cmd)


if __name__ == "__main__":
    cli()
