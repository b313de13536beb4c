"""qBittorrent WebUI API v2 data structures."""

from __future__ import annotations

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict

TorrentFilter = Literal[
    "all",
    "downloading",
    "seeding",
    "completed",
    "paused",
    "active",
    "inactive",
    "resumed",
    "stalled",
    "stalled_uploading",
    "stalled_downloading",
    "errored",
]

TORRENT_FILTERS: tuple[str, ...] = get_args(TorrentFilter)


class TorrentInfo(BaseModel):
    """One entry of ``/api/v2/torrents/info``.

    Only the fields exposed to tool callers are kept; the rest of the
    backend's record is dropped.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    hash: str
    size: int = 0
    progress: float = 0.0
    state: str = ""
    eta: int = 0
