"""Tests for the optimistic favorites coordinator and its API client."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from realty.client import (
    ApiError,
    FavoritesCoordinator,
    JsonFileFavoritesStorage,
    MemoryFavoritesStorage,
    RealtyApiClient,
    ToggleState,
)

Handler = Callable[[httpx.Request], httpx.Response]


class FavoritesServer:
    """Records requests and answers like the favorites endpoints."""

    def __init__(self, server_ids: list[int] | None = None) -> None:
        self.server_ids = list(server_ids or [])
        self.requests: list[httpx.Request] = []
        self.fail_writes = False
        self.get_failures = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/api/favorites":
            if self.get_failures:
                self.get_failures -= 1
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(
                200, json={"favorites": [{"id": pid} for pid in self.server_ids]}
            )
        if self.fail_writes:
            return httpx.Response(503, json={"error": "Database connection failed"})
        if request.method == "POST" and path == "/api/favorites":
            pid = json.loads(request.content)["propertyId"]
            if pid not in self.server_ids:
                self.server_ids.insert(0, pid)
            return httpx.Response(200, json={"success": True})
        if request.method == "POST" and path == "/api/favorites/sync":
            ids = json.loads(request.content)["favoriteIds"]
            for pid in ids:
                if pid not in self.server_ids:
                    self.server_ids.insert(0, pid)
            return httpx.Response(200, json={"success": True, "synced": len(ids)})
        if request.method == "DELETE" and path.startswith("/api/favorites/"):
            pid = int(path.rsplit("/", 1)[1])
            if pid in self.server_ids:
                self.server_ids.remove(pid)
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404, json={"error": "Route not found"})

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def _api(handler: Handler) -> RealtyApiClient:
    return RealtyApiClient("http://api.test", timeout=1.0, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_anonymous_toggle_persists_locally_without_io() -> None:
    server = FavoritesServer()
    storage = MemoryFavoritesStorage()
    coordinator = FavoritesCoordinator(storage, _api(server))

    assert await coordinator.toggle_favorite(11) is True
    assert await coordinator.toggle_favorite(12) is True
    assert await coordinator.toggle_favorite(11) is False

    assert coordinator.favorites == [12]
    assert storage.load() == [12]
    assert coordinator.state_of(11) is ToggleState.SETTLED
    assert server.requests == []


@pytest.mark.asyncio
async def test_authenticated_toggle_settles_after_server_ack() -> None:
    server = FavoritesServer()
    coordinator = FavoritesCoordinator(MemoryFavoritesStorage(), _api(server), "token-1")
    seen: list[list[int]] = []
    coordinator.subscribe(seen.append)

    assert await coordinator.toggle_favorite(5) is True

    assert coordinator.is_favorited(5)
    assert coordinator.state_of(5) is ToggleState.SETTLED
    assert server.server_ids == [5]
    assert seen == [[5]]
    post = server.calls("POST", "/api/favorites")[0]
    assert post.headers["Authorization"] == "Bearer token-1"


@pytest.mark.asyncio
async def test_failed_toggle_rolls_back_memory_and_storage() -> None:
    server = FavoritesServer(server_ids=[3])
    storage = MemoryFavoritesStorage([3])
    coordinator = FavoritesCoordinator(storage, _api(server), "token-1")
    await coordinator.load()
    seen: list[list[int]] = []
    coordinator.subscribe(seen.append)
    server.fail_writes = True

    assert await coordinator.toggle_favorite(3) is True
    assert await coordinator.toggle_favorite(4) is False

    assert coordinator.favorites == [3]
    assert storage.load() == [3]
    assert coordinator.state_of(3) is ToggleState.ROLLED_BACK
    assert coordinator.state_of(4) is ToggleState.ROLLED_BACK
    assert seen == [[], [3], [4, 3], [3]]
    # writes are never retried
    assert len(server.calls("DELETE", "/api/favorites/3")) == 1
    assert len(server.calls("POST", "/api/favorites")) == 1


@pytest.mark.asyncio
async def test_stale_failure_does_not_undo_newer_toggle() -> None:
    release_first = asyncio.Event()
    posts: list[int] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            posts.append(1)
            if len(posts) == 1:
                await release_first.wait()
                return httpx.Response(500, json={"error": "Internal server error"})
        return httpx.Response(200, json={"success": True})

    coordinator = FavoritesCoordinator(MemoryFavoritesStorage(), _api(handler), "token-1")

    first = asyncio.create_task(coordinator.toggle_favorite(9))
    while not posts:
        await asyncio.sleep(0)
    assert coordinator.state_of(9) is ToggleState.RECONCILING
    await coordinator.toggle_favorite(9)
    await coordinator.toggle_favorite(9)
    release_first.set()
    await first

    assert coordinator.is_favorited(9)
    assert coordinator.state_of(9) is ToggleState.SETTLED


@pytest.mark.asyncio
async def test_sign_in_syncs_local_favorites_then_reloads() -> None:
    server = FavoritesServer(server_ids=[1])
    storage = MemoryFavoritesStorage([7, 8, 7])
    coordinator = FavoritesCoordinator(storage, _api(server))

    assert await coordinator.sign_in("token-2") is True

    sync = server.calls("POST", "/api/favorites/sync")
    assert len(sync) == 1
    assert json.loads(sync[0].content) == {"favoriteIds": [7, 8, 7]}
    assert storage.load() == []
    assert coordinator.favorites == [8, 7, 1]


@pytest.mark.asyncio
async def test_failed_sync_keeps_local_list_and_skips_reload() -> None:
    server = FavoritesServer(server_ids=[1])
    server.fail_writes = True
    storage = MemoryFavoritesStorage([7, 8])
    coordinator = FavoritesCoordinator(storage, _api(server))

    assert await coordinator.sign_in("token-2") is False

    assert storage.load() == [7, 8]
    assert server.calls("GET", "/api/favorites") == []


@pytest.mark.asyncio
async def test_sync_requires_a_session() -> None:
    server = FavoritesServer()
    coordinator = FavoritesCoordinator(MemoryFavoritesStorage([1]), _api(server))

    assert await coordinator.sync_favorites() is False
    assert server.requests == []


@pytest.mark.asyncio
async def test_load_falls_back_to_local_storage_when_server_unreachable() -> None:
    server = FavoritesServer(server_ids=[1])
    server.get_failures = 2
    coordinator = FavoritesCoordinator(MemoryFavoritesStorage([4]), _api(server), "token-1")

    assert await coordinator.load() == [4]
    assert len(server.calls("GET", "/api/favorites")) == 2


@pytest.mark.asyncio
async def test_get_is_retried_once_on_transport_error() -> None:
    server = FavoritesServer(server_ids=[2, 1])
    server.get_failures = 1
    api = _api(server)
    api.session_token = "token-1"

    assert await api.list_favorites() == [2, 1]
    assert len(server.calls("GET", "/api/favorites")) == 2


@pytest.mark.asyncio
async def test_api_error_carries_status_and_message() -> None:
    server = FavoritesServer()
    server.fail_writes = True

    with pytest.raises(ApiError) as excinfo:
        await _api(server).add_favorite(1)

    assert excinfo.value.status_code == 503
    assert excinfo.value.message == "Database connection failed"


def test_json_storage_round_trip_and_corruption(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "favorites.json"
    storage = JsonFileFavoritesStorage(path)

    assert storage.load() == []
    storage.save([3, 1])
    assert storage.load() == [3, 1]

    path.write_text("{not json", encoding="utf-8")
    assert storage.load() == []

    storage.clear()
    assert not path.exists()
    storage.clear()


class ReadOnlyStorage(MemoryFavoritesStorage):
    def save(self, favorite_ids: list[int]) -> None:
        raise PermissionError("read-only file system")


@pytest.mark.asyncio
async def test_toggle_survives_local_storage_write_failure(
    caplog: pytest.LogCaptureFixture,
) -> None:
    server = FavoritesServer()
    coordinator = FavoritesCoordinator(ReadOnlyStorage(), _api(server), "token-1")

    with caplog.at_level(logging.WARNING, logger="realty.client.favorites"):
        assert await coordinator.toggle_favorite(9) is True

    assert coordinator.favorites == [9]
    assert coordinator.state_of(9) is ToggleState.SETTLED
    assert server.server_ids == [9]
    assert "Could not persist favorites locally" in caplog.text
