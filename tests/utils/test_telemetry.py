"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from opentelemetry import trace

from qbit_mcp import __version__
from qbit_mcp.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_TOOL_NAME,
    configure_telemetry,
    get_tracer,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        tracer = get_tracer("test.module")
        assert isinstance(tracer, trace.Tracer)

    def test_default_name(self) -> None:
        tracer = get_tracer()
        assert isinstance(tracer, trace.Tracer)

    def test_noop_span(self) -> None:
        """Without SDK configured, spans should be no-ops."""
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("test") as span:
            span.set_attribute(ATTR_TOOL_NAME, "qbit/getTorrents")


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry(service_name="qbit-mcp", environment="test")

    def test_resource_describes_service(self) -> None:
        sdk_trace = pytest.importorskip("opentelemetry.sdk.trace")

        with patch.object(trace, "set_tracer_provider") as set_provider:
            configure_telemetry(
                service_name="qbit-mcp-test", environment="staging", export_to_console=True
            )

        (provider,), _ = set_provider.call_args
        assert isinstance(provider, sdk_trace.TracerProvider)
        attributes = provider.resource.attributes
        assert attributes["service.name"] == "qbit-mcp-test"
        assert attributes["service.version"] == __version__
        assert attributes["deployment.environment"] == "staging"

    def test_otlp_raises_without_exporter(self) -> None:
        pytest.importorskip("opentelemetry.sdk.trace")

        with patch.dict(
            "sys.modules", {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None}
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(
                    service_name="qbit-mcp",
                    environment="test",
                    otlp_endpoint="http://localhost:4317",
                )


class TestAttributeConstants:
    def test_constants_are_namespaced(self) -> None:
        assert ATTR_TOOL_NAME.startswith("qbit_mcp.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "qbit_mcp"
