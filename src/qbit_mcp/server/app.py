"""Application composition root and Starlette HTTP transport.

Creates the qBittorrent client, registers every tool against it, and wires
the JSON-RPC handler behind ``POST /rpc``.  ``GET /health`` is a liveness
probe that never touches the backend.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from starlette.applications import Starlette
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from qbit_mcp.qbit.client import QBitClient
from qbit_mcp.rpc.handler import JsonRpcHandler
from qbit_mcp.rpc.models import INTERNAL_ERROR, INVALID_REQUEST, PARSE_ERROR, JsonRpcResponse
from qbit_mcp.tools.add_torrent import AddTorrentTool
from qbit_mcp.tools.get_torrents import GetTorrentsTool
from qbit_mcp.tools.registry import ToolRegistry
from qbit_mcp.tools.service import ToolService

if TYPE_CHECKING:
    from starlette.requests import Request

    from qbit_mcp.config import AppConfig

logger = logging.getLogger(__name__)

TOOL_TYPES = (GetTorrentsTool, AddTorrentTool)

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    # JSON-only API, nothing is ever rendered by a browser.
    "Content-Security-Policy": "default-src 'none'",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds static security headers to every response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for header, value in _SECURITY_HEADERS.items():
            response.headers[header] = value
        return response


def build_registry(client: QBitClient) -> ToolRegistry:
    """Register every known tool against *client*."""
    registry = ToolRegistry()
    for tool_type in TOOL_TYPES:
        registry.register(tool_type(client))
    return registry


async def _read_limited(request: Request, limit: int) -> bytes | None:
    """Read the request body, or return ``None`` once it exceeds *limit* bytes."""
    chunks: list[bytes] = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


def create_app(config: AppConfig, *, qbit_client: QBitClient | None = None) -> Starlette:
    """Create the ASGI application.

    The application lifespan opens and closes the qBittorrent client.
    """
    client = qbit_client if qbit_client is not None else QBitClient.from_settings(config.qbit)
    expose_errors = config.server.expose_errors
    body_limit = config.server.json_body_limit

    service = ToolService(build_registry(client), expose_errors=expose_errors)
    handler = JsonRpcHandler(service, expose_errors=expose_errors)

    def _error(status_code: int, code: int, message: str, data: Any = None) -> JSONResponse:
        body = JsonRpcResponse.failure(None, code, message, data).to_wire()
        return JSONResponse(body, status_code=status_code)

    async def rpc(request: Request) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > body_limit:
            return _error(413, INVALID_REQUEST, "Request body too large")
        raw = await _read_limited(request, body_limit)
        if raw is None:
            return _error(413, INVALID_REQUEST, "Request body too large")

        try:
            body = json.loads(raw)
        except ValueError:
            return _error(400, PARSE_ERROR, "Parse error", "Invalid JSON format" if expose_errors else None)

        try:
            result = await handler.handle_request(body)
        except Exception as exc:
            logger.exception("Unexpected error in /rpc handler")
            return _error(500, INTERNAL_ERROR, "Internal server error", str(exc) if expose_errors else None)

        if result is None:
            return Response(status_code=204)
        return JSONResponse(result)

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    @asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        async with client:
            logger.info("RPC endpoint ready, qBittorrent API at %s", client.api_url)
            yield

    app = Starlette(
        routes=[
            Route("/rpc", endpoint=rpc, methods=["POST"]),
            Route("/health", endpoint=health, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    return app
