"""``qbit/addTorrent`` — add a torrent by magnet link or ``.torrent`` URL."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from qbit_mcp.qbit.client import QBitClient

logger = logging.getLogger(__name__)


class AddTorrentArgs(BaseModel):
    """Arguments of ``qbit/addTorrent``."""

    url: str = Field(min_length=1, description="Magnet link or HTTP(S) URL of a .torrent file.")

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if any(ch.isspace() or not ch.isprintable() for ch in value):
            msg = "URL must not contain whitespace or control characters."
            raise ValueError(msg)
        parts = urlsplit(value)
        scheme = parts.scheme.lower()
        if not scheme:
            msg = "Invalid URL. Must be a valid magnet link or .torrent URL."
            raise ValueError(msg)
        if scheme == "magnet":
            if not parts.query:
                msg = "Magnet link has no parameters."
                raise ValueError(msg)
        elif scheme in ("http", "https"):
            if not parts.netloc:
                msg = "Invalid URL. Must be a valid magnet link or .torrent URL."
                raise ValueError(msg)
        else:
            msg = "URL must be a magnet link or HTTP/HTTPS URL"
            raise ValueError(msg)
        return value


class AddTorrentTool:
    """Submits a new torrent to qBittorrent."""

    name = "qbit/addTorrent"
    description = (
        "Adds a new torrent to qBittorrent using a magnet link or a URL to a .torrent file."
    )
    input_schema = AddTorrentArgs

    def __init__(self, client: QBitClient) -> None:
        self._client = client

    async def execute(self, args: AddTorrentArgs) -> dict[str, Any]:
        logger.info("Adding torrent from URL: %s...", args.url[:50])
        success = await self._client.add_torrent(args.url)
        message = "Torrent added successfully." if success else "Failed to add torrent."
        logger.info("Add torrent result: %s", message)
        return {"success": success, "message": message}
