"""Tests for the HTTP transport and composition root."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

from starlette.testclient import TestClient

from qbit_mcp.config import AppConfig, QBitSettings, ServerSettings
from qbit_mcp.errors import BackendConnectionError
from qbit_mcp.qbit.models import TorrentInfo
from qbit_mcp.rpc.handler import JsonRpcHandler
from qbit_mcp.server.app import build_registry, create_app

MAGNET = "magnet:?xt=urn:btih:08ada5a7a6183aae1e09d83176f01c045d93a6da"


def _config(**server: Any) -> AppConfig:
    return AppConfig(
        qbit=QBitSettings(base_url="http://qbit.test", username="admin", password="secret"),
        server=ServerSettings(**server),
    )


def _mock_client() -> MagicMock:
    client = MagicMock()
    client.get_torrents = AsyncMock(
        return_value=[
            TorrentInfo(name="test.iso", hash="123", size=1000, progress=1, state="seeding", eta=0),
            TorrentInfo(
                name="test.mp4", hash="456", size=500, progress=0.5, state="downloading", eta=3600
            ),
        ]
    )
    client.add_torrent = AsyncMock(return_value=True)
    return client


def _http(client: MagicMock | None = None, **server: Any) -> TestClient:
    return TestClient(create_app(_config(**server), qbit_client=client or _mock_client()))


def _rpc(method: str, params: dict[str, Any] | None = None, request_id: Any = 1) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params or {}}


class TestHealth:
    def test_health(self) -> None:
        response = _http().get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_security_headers(self) -> None:
        response = _http().get("/health")
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
        assert response.headers["content-security-policy"] == "default-src 'none'"


class TestRpcTransport:
    def test_parse_error(self) -> None:
        response = _http().post(
            "/rpc", content=b"not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400
        body = response.json()
        assert body["id"] is None
        assert body["error"]["code"] == -32700
        assert body["error"]["data"] == "Invalid JSON format"

    def test_parse_error_hides_detail_in_production(self) -> None:
        response = _http(environment="production").post("/rpc", content=b"{")
        assert response.status_code == 400
        assert response.json()["error"]["data"] is None

    def test_body_too_large(self) -> None:
        response = _http(json_body_limit=16).post("/rpc", json=_rpc("tools/list"))
        assert response.status_code == 413
        assert response.json()["error"]["code"] == -32600

    def test_chunked_body_too_large(self) -> None:
        chunks = iter([b'{"jsonrpc": "2.0", ', b'"id": 1, "method": "tools/list"}'])
        response = _http(json_body_limit=16).post("/rpc", content=chunks)
        assert response.status_code == 413
        assert response.json()["error"]["code"] == -32600

    def test_chunked_body_within_limit(self) -> None:
        chunks = iter([b'{"jsonrpc": "2.0", ', b'"id": 1, "method": "tools/list"}'])
        response = _http().post("/rpc", content=chunks)
        assert response.status_code == 200
        assert response.json()["id"] == 1

    def test_method_not_found(self) -> None:
        response = _http().post("/rpc", json=_rpc("nonexistent/method"))
        assert response.status_code == 200
        body = response.json()
        assert body["error"]["code"] == -32601
        assert "nonexistent/method" in body["error"]["message"]

    def test_notification_only_returns_no_content(self) -> None:
        client = _mock_client()
        notification = {
            "jsonrpc": "2.0",
            "method": "tools/call",
            "params": {"name": "qbit/addTorrent", "arguments": {"url": MAGNET}},
        }
        response = _http(client).post("/rpc", json=[notification, notification])
        assert response.status_code == 204
        assert response.content == b""
        assert client.add_torrent.await_count == 2

    def test_mixed_batch(self) -> None:
        response = _http().post(
            "/rpc",
            json=[
                _rpc("tools/call", {"name": "qbit/getTorrents", "arguments": {}}, request_id=1),
                {"jsonrpc": "2.0", "method": "tools/list"},
                _rpc("unknown/method", request_id=2),
            ],
        )
        assert response.status_code == 200
        body = response.json()
        assert [entry["id"] for entry in body] == [1, 2]
        assert body[0]["result"]["isError"] is False
        assert body[1]["error"]["code"] == -32601

    def test_unexpected_failure_returns_500(self) -> None:
        http = _http()
        with patch.object(
            JsonRpcHandler, "handle_request", AsyncMock(side_effect=RuntimeError("kaboom"))
        ):
            response = http.post("/rpc", json=_rpc("tools/list"))
        assert response.status_code == 500
        body = response.json()
        assert body["error"]["code"] == -32603
        assert body["error"]["message"] == "Internal server error"
        assert body["error"]["data"] == "kaboom"


class TestTools:
    def test_get_torrents(self) -> None:
        client = _mock_client()
        response = _http(client).post(
            "/rpc", json=_rpc("tools/call", {"name": "qbit/getTorrents", "arguments": {"filter": "all"}})
        )
        assert response.status_code == 200
        body = response.json()
        assert "error" not in body
        assert body["result"]["isError"] is False
        assert len(body["result"]["content"]) == 2
        assert body["result"]["content"][0]["name"] == "test.iso"
        assert body["result"]["content"][1]["progress"] == 0.5
        client.get_torrents.assert_awaited_once_with("all", None)

    def test_get_torrents_invalid_arguments(self) -> None:
        client = _mock_client()
        response = _http(client).post(
            "/rpc", json=_rpc("tools/call", {"name": "qbit/getTorrents", "arguments": {"filter": 123}})
        )
        assert response.status_code == 200
        body = response.json()
        assert "error" not in body
        assert body["result"]["isError"] is True
        assert "Invalid arguments" in body["result"]["message"]
        assert body["result"]["data"]
        client.get_torrents.assert_not_awaited()

    def test_add_torrent(self) -> None:
        client = _mock_client()
        response = _http(client).post(
            "/rpc", json=_rpc("tools/call", {"name": "qbit/addTorrent", "arguments": {"url": MAGNET}})
        )
        body = response.json()
        assert body["result"]["isError"] is False
        assert body["result"]["content"]["success"] is True
        client.add_torrent.assert_awaited_once_with(MAGNET)

    def test_add_torrent_invalid_url(self) -> None:
        client = _mock_client()
        response = _http(client).post(
            "/rpc", json=_rpc("tools/call", {"name": "qbit/addTorrent", "arguments": {"url": "not_a_url"}})
        )
        body = response.json()
        assert body["result"]["isError"] is True
        assert "Invalid arguments" in body["result"]["message"]
        client.add_torrent.assert_not_awaited()

    def test_backend_failure_detail_in_development(self) -> None:
        client = _mock_client()
        client.add_torrent = AsyncMock(side_effect=BackendConnectionError("refused"))
        response = _http(client).post(
            "/rpc", json=_rpc("tools/call", {"name": "qbit/addTorrent", "arguments": {"url": MAGNET}})
        )
        result = response.json()["result"]
        assert result["isError"] is True
        assert result["message"] == "Tool 'qbit/addTorrent' failed."
        assert "Cannot connect to qBittorrent" in result["data"]

    def test_backend_failure_hidden_in_production(self) -> None:
        client = _mock_client()
        client.add_torrent = AsyncMock(side_effect=BackendConnectionError("refused"))
        response = _http(client, environment="production").post(
            "/rpc", json=_rpc("tools/call", {"name": "qbit/addTorrent", "arguments": {"url": MAGNET}})
        )
        assert response.json()["result"]["data"] is None

    def test_tools_list(self) -> None:
        response = _http().post("/rpc", json=_rpc("tools/list"))
        names = [tool["name"] for tool in response.json()["result"]["tools"]]
        assert names == ["qbit/getTorrents", "qbit/addTorrent"]


class TestLifespan:
    def test_client_opened_and_closed(self) -> None:
        client = _mock_client()
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=False)
        with TestClient(create_app(_config(), qbit_client=client)) as http:
            assert http.get("/health").status_code == 200
            client.__aenter__.assert_awaited_once()
        client.__aexit__.assert_awaited_once()


class TestBuildRegistry:
    def test_registers_all_tools(self) -> None:
        registry = build_registry(_mock_client())
        assert [tool.name for tool in registry.all()] == ["qbit/getTorrents", "qbit/addTorrent"]
