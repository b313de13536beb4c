"""ToolService — implements the ``tools/call`` and ``tools/list`` methods.

``call_tool`` never raises: every failure (bad envelope, unknown tool, bad
arguments, tool crash) becomes a :class:`ToolCallResult` with
``isError=True``, because a tool that cannot satisfy a well-formed request is
valid RPC output rather than a protocol error.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from qbit_mcp.rpc.models import ToolCallParams, ToolCallResult
from qbit_mcp.utils.telemetry import ATTR_TOOL_IS_ERROR, ATTR_TOOL_NAME, get_tracer

if TYPE_CHECKING:
    from qbit_mcp.tools.base import McpTool
    from qbit_mcp.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class ToolService:
    """Validates and executes tool calls against a :class:`ToolRegistry`.

    ``expose_errors`` controls whether the message of an exception raised by a
    tool is returned to the caller.  It should be ``False`` in production so
    backend error text never leaks.
    """

    def __init__(self, registry: ToolRegistry, *, expose_errors: bool = False) -> None:
        self._registry = registry
        self._expose_errors = expose_errors

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def call_tool(self, params: Any) -> dict[str, Any]:
        """Handle ``tools/call`` and return the wire form of a ToolCallResult."""
        try:
            call = ToolCallParams.model_validate(params)
        except ValidationError as exc:
            return ToolCallResult.failure(
                "Invalid 'tools/call' parameters.", _error_details(exc)
            ).to_wire()

        tool = self._registry.get(call.name)
        if tool is None:
            return ToolCallResult.failure(f"Tool '{call.name}' not found.").to_wire()

        with _tracer.start_as_current_span("qbit_mcp.tool.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, tool.name)
            result = await self._execute(tool, call.arguments)
            span.set_attribute(ATTR_TOOL_IS_ERROR, result.is_error)
        return result.to_wire()

    async def list_tools(self, params: Any = None) -> dict[str, Any]:
        """Handle ``tools/list``: describe every registered tool."""
        return {
            "tools": [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "inputSchema": tool.input_schema.model_json_schema(),
                }
                for tool in self._registry.all()
            ]
        }

    async def _execute(self, tool: McpTool, arguments: dict[str, Any]) -> ToolCallResult:
        try:
            args = tool.input_schema.model_validate(arguments)
        except ValidationError as exc:
            details = _error_details(exc)
            logger.warning("Invalid arguments for tool '%s': %s", tool.name, details)
            return ToolCallResult.failure(f"Invalid arguments for tool '{tool.name}'.", details)

        try:
            content = await tool.execute(args)
        except Exception as exc:
            logger.exception("Error executing tool '%s'", tool.name)
            data = str(exc) if self._expose_errors else None
            return ToolCallResult.failure(f"Tool '{tool.name}' failed.", data)

        return ToolCallResult.success(content)


def _error_details(exc: ValidationError) -> list[dict[str, Any]]:
    """Return JSON-safe validation error details (no doc URLs)."""
    details: list[dict[str, Any]] = json.loads(exc.json(include_url=False))
    return details
