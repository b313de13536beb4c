"""``qbit-mcp serve`` — run the JSON-RPC HTTP server."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from qbit_mcp.cli_commands._output import console


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (environment variables take precedence).",
)
@click.option("--host", default=None, help="Bind address (overrides config).")
@click.option("--port", type=int, default=None, help="Port number (overrides config).")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Logging level.",
)
@click.option("--trace-console", is_flag=True, help="Export trace spans to stdout.")
@click.option("--otlp-endpoint", default=None, help="Export trace spans via OTLP/gRPC.")
@click.option(
    "--service-name",
    default="qbit-mcp",
    show_default=True,
    help="service.name reported on trace spans.",
)
def serve(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    log_level: str,
    trace_console: bool,
    otlp_endpoint: str | None,
    service_name: str,
) -> None:
    """Serve the JSON-RPC endpoint (POST /rpc) and health check (GET /health)."""
    import uvicorn

    from qbit_mcp.config import load_config
    from qbit_mcp.errors import ConfigError
    from qbit_mcp.server.app import create_app

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    overrides = {key: value for key, value in (("host", host), ("port", port)) if value is not None}
    if overrides:
        config.server = config.server.model_copy(update=overrides)

    if trace_console or otlp_endpoint:
        from qbit_mcp.utils.telemetry import configure_telemetry

        try:
            configure_telemetry(
                service_name=service_name,
                environment=config.server.environment,
                export_to_console=trace_console,
                otlp_endpoint=otlp_endpoint,
            )
        except ImportError as exc:
            console.print(f"[red]Telemetry error:[/red] {exc}")
            sys.exit(1)

    console.print(
        f"[green]qbit-mcp[/green] RPC endpoint: http://{config.server.host}:{config.server.port}/rpc"
    )
    uvicorn.run(
        create_app(config),
        host=config.server.host,
        port=config.server.port,
        log_level=log_level.lower(),
    )
