"""``qbit/getTorrents`` — list torrents known to qBittorrent."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from qbit_mcp.qbit.models import TorrentFilter

if TYPE_CHECKING:
    from qbit_mcp.qbit.client import QBitClient

logger = logging.getLogger(__name__)


class GetTorrentsArgs(BaseModel):
    """Arguments of ``qbit/getTorrents``."""

    filter: TorrentFilter | None = Field(
        default=None,
        description="Torrent state filter, e.g. 'downloading', 'seeding' or 'all'.",
    )
    category: str | None = Field(
        default=None,
        min_length=1,
        description="Only list torrents in this category.",
    )


class GetTorrentsTool:
    """Lists torrents with a compact summary per entry."""

    name = "qbit/getTorrents"
    description = (
        "Lists torrents from qBittorrent. Can be narrowed by state filter "
        '(e.g. "downloading", "seeding", "paused", "all") and by category.'
    )
    input_schema = GetTorrentsArgs

    def __init__(self, client: QBitClient) -> None:
        self._client = client

    async def execute(self, args: GetTorrentsArgs) -> list[dict[str, Any]]:
        logger.info("Listing torrents (filter=%s, category=%s)", args.filter, args.category)
        torrents = await self._client.get_torrents(args.filter, args.category)
        return [torrent.model_dump() for torrent in torrents]
