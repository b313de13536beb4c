"""HTTP transport and application composition root."""

from qbit_mcp.server.app import TOOL_TYPES, build_registry, create_app

__all__ = ["TOOL_TYPES", "build_registry", "create_app"]
