"""Tool layer — capability protocol, registry, execution service, and tools."""

from qbit_mcp.tools.add_torrent import AddTorrentArgs, AddTorrentTool
from qbit_mcp.tools.base import McpTool
from qbit_mcp.tools.get_torrents import GetTorrentsArgs, GetTorrentsTool
from qbit_mcp.tools.registry import ToolRegistry
from qbit_mcp.tools.service import ToolService

__all__ = [
    "AddTorrentArgs",
    "AddTorrentTool",
    "GetTorrentsArgs",
    "GetTorrentsTool",
    "McpTool",
    "ToolRegistry",
    "ToolService",
]
