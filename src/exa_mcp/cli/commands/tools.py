"""Capability listing command."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from exa_mcp.cli.commands.serve import load_cli_config
from exa_mcp.core.capabilities import CAPABILITIES, compute_active_set


@click.command(name="tools")
@click.option("--tools", default=None, help="Comma-separated tool ids to resolve against")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML config file with exa_api_key/tools/debug keys",
)
def tools_cmd(tools: str | None, config_path: Path | None) -> None:
    """List every capability and whether it would be enabled."""
    config = load_cli_config(config_path, tools=tools)
    active = set(compute_active_set(config, CAPABILITIES))

    table = Table(title="Exa MCP tools")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Default")
    table.add_column("Enabled")
    for descriptor in CAPABILITIES:
        table.add_row(
            descriptor.id,
            descriptor.display_name,
            "yes" if descriptor.default_enabled else "no",
            "[green]yes[/green]" if descriptor.id in active else "[dim]no[/dim]",
        )
    Console().print(table)
