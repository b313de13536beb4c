"""qbit-mcp CLI entrypoint."""

from __future__ import annotations

import click

from qbit_mcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="qbit-mcp")
def main() -> None:
    """qbit-mcp — JSON-RPC tool server for qBittorrent."""


# Register subcommands
from qbit_mcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
