"""``qbit-mcp tools`` — inspect and invoke tools from the command line."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import click

from qbit_mcp.cli_commands._output import console, print_tool_result, print_tools_table


@click.group()
def tools() -> None:
    """Inspect and invoke tools."""


@tools.command("list")
def list_tools() -> None:
    """List registered tools. Does not contact qBittorrent."""
    from qbit_mcp.server.app import TOOL_TYPES

    print_tools_table([
        {
            "name": tool_type.name,
            "description": tool_type.description,
            "inputSchema": tool_type.input_schema.model_json_schema(),
        }
        for tool_type in TOOL_TYPES
    ])


@tools.command("call")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (environment variables take precedence).",
)
def call(name: str, raw_args: str, config_path: Path | None) -> None:
    """Invoke tool NAME once against the configured qBittorrent instance."""
    from qbit_mcp.config import load_config
    from qbit_mcp.errors import ConfigError
    from qbit_mcp.qbit.client import QBitClient
    from qbit_mcp.server.app import build_registry
    from qbit_mcp.tools.service import ToolService

    try:
        arguments = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid --args JSON:[/red] {exc}")
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    async def _call() -> dict[str, Any]:
        async with QBitClient.from_settings(config.qbit) as client:
            service = ToolService(
                build_registry(client), expose_errors=config.server.expose_errors
            )
            return await service.call_tool({"name": name, "arguments": arguments})

    print_tool_result(asyncio.run(_call()))
