"""JSON-RPC 2.0 messages and the ``tools/call`` payloads.

Responses are built as pydantic models and converted to plain dicts with
:meth:`JsonRpcResponse.to_wire` so the transport can serialise them directly.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INTERNAL_ERROR = -32603

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    ``id`` is echoed verbatim from the request, so it is left untyped: a
    malformed request may carry any JSON value there.
    """

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> JsonRpcResponse:
        if self.error is not None and self.result is not None:
            msg = "a response carries either 'result' or 'error', never both"
            raise ValueError(msg)
        return self

    @classmethod
    def failure(
        cls,
        request_id: Any,
        code: int,
        message: str,
        data: Any = None,
    ) -> JsonRpcResponse:
        """Build an error response."""
        return cls(id=request_id, error=JsonRpcError(code=code, message=message, data=data))

    def to_wire(self) -> dict[str, Any]:
        """Return the wire form, containing exactly one of ``result``/``error``."""
        if self.error is not None:
            return {"jsonrpc": self.jsonrpc, "id": self.id, "error": self.error.model_dump()}
        return {"jsonrpc": self.jsonrpc, "id": self.id, "result": self.result}


# ---------------------------------------------------------------------------
# tools/call payloads
# ---------------------------------------------------------------------------


class ToolCallParams(BaseModel):
    """Parameters of the ``tools/call`` method.

    Unknown top-level keys are tolerated; ``arguments`` is passed through to
    the tool's own schema untouched.
    """

    model_config = ConfigDict(extra="allow")

    name: str
    arguments: dict[str, Any]


class ToolCallResult(BaseModel):
    """Outcome of a tool invocation, returned as the RPC ``result``.

    A failing tool is still a successful RPC call; the failure is reported
    through ``isError``.
    """

    model_config = ConfigDict(populate_by_name=True)

    is_error: bool = Field(alias="isError")
    content: Any = None
    message: str | None = None
    data: Any = None

    @classmethod
    def success(cls, content: Any) -> ToolCallResult:
        return cls(is_error=False, content=content)

    @classmethod
    def failure(cls, message: str, data: Any = None) -> ToolCallResult:
        return cls(is_error=True, message=message, data=data)

    def to_wire(self) -> dict[str, Any]:
        if self.is_error:
            return {"isError": True, "message": self.message, "data": self.data}
        return {"isError": False, "content": self.content}
