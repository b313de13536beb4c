"""JsonRpcHandler — parses, validates, and dispatches JSON-RPC 2.0 requests.

Decouples the HTTP transport from the tool layer: the transport hands over the
decoded JSON body and receives either a response body or ``None`` when nothing
should be sent back (the request consisted only of notifications).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from qbit_mcp.rpc.models import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    METHOD_NOT_FOUND,
    JsonRpcResponse,
)
from qbit_mcp.utils.telemetry import ATTR_RPC_BATCH_SIZE, ATTR_RPC_METHOD, get_tracer

if TYPE_CHECKING:
    from qbit_mcp.tools.service import ToolService

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

MethodHandler = Callable[[Any], Awaitable[Any]]


class JsonRpcHandler:
    """Routes JSON-RPC methods to the :class:`ToolService`.

    Usage::

        handler = JsonRpcHandler(tool_service, expose_errors=False)
        body = await handler.handle_request({"jsonrpc": "2.0", "id": 1, ...})

    A request is answered only if its object *has* an ``id`` key, whatever the
    value (``null`` and ``0`` included).  Envelope errors detected before
    dispatch are always answered, with ``id`` falling back to ``null``.
    """

    def __init__(self, tool_service: ToolService, *, expose_errors: bool = False) -> None:
        self._expose_errors = expose_errors
        self._dispatch: dict[str, MethodHandler] = {
            "tools/call": tool_service.call_tool,
            "tools/list": tool_service.list_tools,
        }

    @property
    def methods(self) -> list[str]:
        """Names of all dispatchable methods."""
        return list(self._dispatch)

    async def handle_request(self, body: Any) -> dict[str, Any] | list[dict[str, Any]] | None:
        """Handle a decoded request body (single object or batch)."""
        if isinstance(body, list):
            return await self._handle_batch(body)

        if not isinstance(body, dict):
            return _error(None, "Request body must be a JSON object or array.")

        return await self._handle_single(body)

    async def _handle_batch(self, entries: list[Any]) -> dict[str, Any] | list[dict[str, Any]] | None:
        if not entries:
            return _error(None, "Batch request cannot be empty.")

        with _tracer.start_as_current_span("qbit_mcp.rpc.batch") as span:
            span.set_attribute(ATTR_RPC_BATCH_SIZE, len(entries))
            responses = await asyncio.gather(*[self._handle_entry(entry) for entry in entries])

        collected = [response for response in responses if response is not None]
        return collected or None

    async def _handle_entry(self, entry: Any) -> dict[str, Any] | None:
        if not isinstance(entry, dict):
            return _error(None, "Batch entries must be objects.")
        return await self._handle_single(entry)

    async def _handle_single(self, request: dict[str, Any]) -> dict[str, Any] | None:
        request_id = request.get("id")
        method = request.get("method")

        if request.get("jsonrpc") != JSONRPC_VERSION:
            return _error(request_id, "Invalid JSON-RPC version.")
        if not isinstance(method, str):
            return _error(request_id, "Method must be a string.")

        handler = self._dispatch.get(method)
        if handler is None:
            return JsonRpcResponse.failure(
                request_id, METHOD_NOT_FOUND, f"Method '{method}' not found."
            ).to_wire()

        params = request.get("params")
        if params is None:
            params = {}
        is_request = "id" in request

        with _tracer.start_as_current_span("qbit_mcp.rpc.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, method)
            try:
                result = await handler(params)
            except Exception as exc:
                logger.exception("Internal error in method '%s'", method)
                if not is_request:
                    return None
                data = str(exc) if self._expose_errors else None
                return JsonRpcResponse.failure(
                    request_id, INTERNAL_ERROR, "Internal error", data
                ).to_wire()

        if not is_request:
            return None
        return JsonRpcResponse(id=request_id, result=result).to_wire()


def _error(request_id: Any, detail: str) -> dict[str, Any]:
    """Build an ``Invalid Request`` (-32600) error body."""
    return JsonRpcResponse.failure(request_id, INVALID_REQUEST, "Invalid Request", detail).to_wire()
