"""JSON-RPC 2.0 envelope models and dispatcher."""

from qbit_mcp.rpc.handler import JsonRpcHandler
from qbit_mcp.rpc.models import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcResponse,
    ToolCallParams,
    ToolCallResult,
)

__all__ = [
    "INTERNAL_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "JsonRpcError",
    "JsonRpcHandler",
    "JsonRpcResponse",
    "ToolCallParams",
    "ToolCallResult",
]
