"""QBitClient — session-aware client for the qBittorrent WebUI API (v2).

Owns the single backend session of the process.  The session cookie is
obtained lazily on first use and reused until the backend rejects it with
``403 Forbidden``, at which point the client logs in again and retries the
rejected request exactly once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import httpx

from qbit_mcp.errors import (
    BackendConnectionError,
    BackendTimeoutError,
    LoginFailedError,
    ReloginFailedError,
)
from qbit_mcp.qbit.models import TorrentInfo
from qbit_mcp.utils.telemetry import ATTR_QBIT_RETRIED, get_tracer

if TYPE_CHECKING:
    from qbit_mcp.config import QBitSettings

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

RequestBuilder = Callable[[str], Awaitable[httpx.Response]]
"""Sends one request with the given session cookie attached."""

_ACK = "Ok."


class QBitClient:
    """Async context manager wrapping one ``httpx.AsyncClient``.

    Usage::

        async with QBitClient("http://localhost:8080", "admin", "secret") as client:
            torrents = await client.get_torrents("downloading")
            added = await client.add_torrent("magnet:?xt=urn:btih:...")

    Logins are serialised: while one is in flight, every other caller that
    needs a session awaits that same attempt and shares its outcome.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._username = username
        self._password = password
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._cookie: str | None = None
        self._login_task: asyncio.Task[bool] | None = None

    @classmethod
    def from_settings(cls, settings: QBitSettings, **kwargs: Any) -> QBitClient:
        return cls(
            settings.base_url,
            settings.username,
            settings.password,
            timeout=settings.timeout,
            **kwargs,
        )

    @property
    def api_url(self) -> str:
        return f"{self._base_url}/api/v2"

    async def __aenter__(self) -> QBitClient:
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *_: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "QBitClient must be used as an async context manager"
            raise RuntimeError(msg)
        return self._client

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------

    async def login(self) -> bool:
        """Authenticate and store the session cookie.

        Returns ``False`` (leaving the current session untouched) when the
        backend does not answer ``Ok.``, sends no cookie, or cannot be reached.
        """
        http = self._http()
        try:
            response = await http.post(
                "/auth/login",
                data={"username": self._username, "password": self._password},
            )
        except httpx.HTTPError as exc:
            logger.error("Login request failed: %s", exc)
            return False

        if response.text.strip() != _ACK:
            logger.warning("Login failed: 'Ok.' not received (HTTP %s)", response.status_code)
            return False

        set_cookie = response.headers.get_list("set-cookie")
        if not set_cookie:
            logger.warning("Login failed: no session cookie in response")
            return False

        # The session cookie is tracked explicitly, not through the client jar.
        http.cookies.clear()
        self._cookie = set_cookie[0].split(";", 1)[0].strip()
        logger.info("Login successful.")
        return True

    async def call(self, request_builder: RequestBuilder) -> httpx.Response:
        """Run *request_builder* with the session cookie, recovering from expiry.

        Raises:
            LoginFailedError: No session could be established.
            ReloginFailedError: The session expired and re-authentication failed.
            BackendConnectionError: The backend is unreachable.
            BackendTimeoutError: The backend did not answer in time.
            httpx.HTTPStatusError: Any other non-success status, including a
                second ``403`` after the single retry.
        """
        if self._cookie is None and not await self._refresh_session(stale=None):
            raise LoginFailedError
        cookie = self._cookie
        assert cookie is not None

        with _tracer.start_as_current_span("qbit_mcp.qbit.request") as span:
            span.set_attribute(ATTR_QBIT_RETRIED, False)
            try:
                return await self._send(request_builder, cookie)
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code != httpx.codes.FORBIDDEN:
                    raise

            logger.warning("Session expired (403). Re-authenticating...")
            if not await self._refresh_session(stale=cookie):
                raise ReloginFailedError
            assert self._cookie is not None

            span.set_attribute(ATTR_QBIT_RETRIED, True)
            return await self._send(request_builder, self._cookie)

    async def _refresh_session(self, stale: str | None) -> bool:
        """Log in unless another caller already replaced the *stale* cookie."""
        if self._cookie is not None and self._cookie != stale:
            return True
        if self._login_task is None:
            self._login_task = asyncio.create_task(self._login_once())
        return await asyncio.shield(self._login_task)

    async def _login_once(self) -> bool:
        try:
            return await self.login()
        finally:
            self._login_task = None

    async def _send(self, request_builder: RequestBuilder, cookie: str) -> httpx.Response:
        try:
            response = await request_builder(cookie)
            response.raise_for_status()
        except httpx.ConnectError as exc:
            raise BackendConnectionError(str(exc)) from exc
        except httpx.TimeoutException as exc:
            raise BackendTimeoutError(self._timeout) from exc
        return response

    # ------------------------------------------------------------------
    # API operations
    # ------------------------------------------------------------------

    async def get_torrents(
        self,
        torrent_filter: str | None = None,
        category: str | None = None,
    ) -> list[TorrentInfo]:
        """List torrents, optionally narrowed by state filter and category."""
        params: dict[str, str] = {}
        if torrent_filter is not None:
            params["filter"] = torrent_filter
        if category is not None:
            params["category"] = category

        async def request(cookie: str) -> httpx.Response:
            return await self._http().get(
                "/torrents/info", params=params, headers={"Cookie": cookie}
            )

        response = await self.call(request)
        return [TorrentInfo.model_validate(item) for item in response.json()]

    async def add_torrent(self, url: str) -> bool:
        """Add a torrent from a magnet link or ``.torrent`` URL.

        Returns ``True`` only if the backend acknowledges with ``Ok.``.
        """

        async def request(cookie: str) -> httpx.Response:
            return await self._http().post(
                "/torrents/add", data={"urls": url}, headers={"Cookie": cookie}
            )

        response = await self.call(request)
        return response.text.strip() == _ACK
