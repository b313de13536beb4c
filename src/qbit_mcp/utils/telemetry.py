"""Tracing for qbit-mcp.

Modules take a tracer from :func:`get_tracer` and open spans unconditionally;
they are no-ops until ``serve --trace-console`` or ``--otlp-endpoint`` calls
:func:`configure_telemetry` (needs the ``otel`` extra).
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

# ---------------------------------------------------------------------------
# Semantic attribute keys
# ---------------------------------------------------------------------------

ATTR_RPC_METHOD = "qbit_mcp.rpc.method"
ATTR_RPC_BATCH_SIZE = "qbit_mcp.rpc.batch_size"
ATTR_TOOL_NAME = "qbit_mcp.tool.name"
ATTR_TOOL_IS_ERROR = "qbit_mcp.tool.is_error"
ATTR_QBIT_RETRIED = "qbit_mcp.qbit.retried"

_INSTRUMENTATION_NAME = "qbit_mcp"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return a :class:`~opentelemetry.trace.Tracer` for *name*.

    If the OpenTelemetry SDK has not been configured the returned tracer
    is a no-op.
    """
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str,
    environment: str,
    export_to_console: bool = False,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider for the ``serve`` process.

    Spans carry ``service.name``, ``service.version`` and
    ``deployment.environment``.  Console export is synchronous; OTLP/gRPC
    export is batched.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, with *otlp_endpoint*,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = "Tracing needs opentelemetry-sdk: pip install 'qbit-mcp[otel]'"
        raise ImportError(msg) from exc

    from qbit_mcp import __version__

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": service_name,
                "service.version": __version__,
                "deployment.environment": environment,
            }
        )
    )
    for processor in _span_processors(export_to_console, otlp_endpoint):
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _span_processors(export_to_console: bool, otlp_endpoint: str | None) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = "OTLP export needs opentelemetry-exporter-otlp: pip install 'qbit-mcp[otel]'"
            raise ImportError(msg) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    return processors
