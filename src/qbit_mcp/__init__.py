"""qbit-mcp — JSON-RPC 2.0 tool server for the qBittorrent WebUI API."""

from __future__ import annotations

__version__ = "0.1.0"
