"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.table import Table

console = Console()


def print_tools_table(tools: list[dict[str, Any]]) -> None:
    """Pretty-print tool descriptors (``name``/``description``/``inputSchema``)."""
    table = Table(title="Registered Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Description")
    table.add_column("Arguments")

    for tool in tools:
        properties = tool.get("inputSchema", {}).get("properties", {})
        table.add_row(
            tool.get("name", "?"),
            _truncate(tool.get("description", "")),
            ", ".join(properties) or "-",
        )

    console.print(table)


def print_tool_result(result: dict[str, Any]) -> None:
    """Print a ToolCallResult as JSON, with a status line for failures."""
    if result.get("isError"):
        console.print(f"[red]Tool error:[/red] {result.get('message', '')}")
    console.print_json(json.dumps(result, default=str))


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
