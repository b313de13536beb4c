"""qBittorrent WebUI API client."""

from qbit_mcp.qbit.client import QBitClient
from qbit_mcp.qbit.models import TORRENT_FILTERS, TorrentFilter, TorrentInfo

__all__ = [
    "TORRENT_FILTERS",
    "QBitClient",
    "TorrentFilter",
    "TorrentInfo",
]
