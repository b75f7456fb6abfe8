"""Client-side favorites with optimistic toggles and sign-in reconciliation.

Anonymous visitors keep favorites in local storage only.  Once a session
token is present every toggle is applied locally first, then confirmed with
the API; a failed call restores the id's previous membership.  On sign-in
the locally accumulated ids are pushed in a single sync request.

All methods run on one event loop.  Overlapping toggles on the same id are
resolved last-writer-wins: a response that arrives after a newer toggle of
the same id no longer touches local state.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Protocol

from realty.client.api_client import ApiError, RealtyApiClient

logger = logging.getLogger(__name__)

FavoritesListener = Callable[[list[int]], None]


class ToggleState(str, Enum):
    IDLE = "idle"
    PENDING_OPTIMISTIC_APPLIED = "pending_optimistic_applied"
    RECONCILING = "reconciling"
    SETTLED = "settled"
    ROLLED_BACK = "rolled_back"


class LocalFavoritesStorage(Protocol):
    def load(self) -> list[int]: ...

    def save(self, favorite_ids: list[int]) -> None: ...

    def clear(self) -> None: ...


class MemoryFavoritesStorage:
    def __init__(self, favorite_ids: list[int] | None = None) -> None:
        self._ids = list(favorite_ids or [])

    def load(self) -> list[int]:
        return list(self._ids)

    def save(self, favorite_ids: list[int]) -> None:
        self._ids = list(favorite_ids)

    def clear(self) -> None:
        self._ids = []


class JsonFileFavoritesStorage:
    """Favorites persisted as a JSON array of ids.

    A missing or unreadable file loads as an empty list.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[int]:
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f"Ignoring unreadable favorites file {self.path}: {exc}")
            return []
        if not isinstance(payload, list):
            logger.warning(f"Ignoring favorites file {self.path}: expected a JSON array")
            return []
        return [item for item in payload if isinstance(item, int) and not isinstance(item, bool)]

    def save(self, favorite_ids: list[int]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(list(favorite_ids)), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class FavoritesCoordinator:
    def __init__(
        self,
        storage: LocalFavoritesStorage,
        api: RealtyApiClient | None = None,
        session_token: str | None = None,
    ) -> None:
        self._storage = storage
        self._api = api
        self._favorites: list[int] = []
        self._states: dict[int, ToggleState] = {}
        self._versions: dict[int, int] = {}
        self._listeners: list[FavoritesListener] = []
        self.session_token = session_token
        if api is not None and session_token:
            api.session_token = session_token

    @property
    def favorites(self) -> list[int]:
        return list(self._favorites)

    @property
    def authenticated(self) -> bool:
        return self._api is not None and bool(self.session_token)

    def is_favorited(self, property_id: int) -> bool:
        return property_id in self._favorites

    def state_of(self, property_id: int) -> ToggleState:
        return self._states.get(property_id, ToggleState.IDLE)

    def subscribe(self, listener: FavoritesListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self.favorites
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Favorites listener raised")

    def _set_membership(self, property_id: int, member: bool) -> None:
        if member and property_id not in self._favorites:
            self._favorites.insert(0, property_id)
        elif not member and property_id in self._favorites:
            self._favorites.remove(property_id)
        try:
            self._storage.save(self._favorites)
        except OSError as exc:
            logger.warning(f"Could not persist favorites locally: {exc}")

    async def load(self) -> list[int]:
        """Populate the in-memory list from the server or local storage."""

        if self.authenticated:
            try:
                ids = await self._api.list_favorites()
            except ApiError as exc:
                logger.warning(f"Could not load favorites from server, using local copy: {exc}")
                ids = self._storage.load()
        else:
            ids = self._storage.load()

        self._favorites = list(dict.fromkeys(ids))
        self._notify()
        return self.favorites

    async def toggle_favorite(self, property_id: int) -> bool:
        """Flip ``property_id`` and return its membership once settled.

        Never raises; a failed server call rolls the id back.
        """

        was_favorited = self.is_favorited(property_id)
        version = self._versions.get(property_id, 0) + 1
        self._versions[property_id] = version

        self._set_membership(property_id, not was_favorited)
        self._states[property_id] = ToggleState.PENDING_OPTIMISTIC_APPLIED
        self._notify()

        if not self.authenticated:
            self._states[property_id] = ToggleState.SETTLED
            return not was_favorited

        self._states[property_id] = ToggleState.RECONCILING
        try:
            if was_favorited:
                await self._api.remove_favorite(property_id)
            else:
                await self._api.add_favorite(property_id)
        except ApiError as exc:
            if self._versions[property_id] != version:
                logger.info(f"Stale favorite failure for {property_id} ignored: {exc}")
                return self.is_favorited(property_id)
            logger.warning(f"Favorite toggle for {property_id} failed, rolling back: {exc}")
            self._set_membership(property_id, was_favorited)
            self._states[property_id] = ToggleState.ROLLED_BACK
            self._notify()
            return was_favorited

        if self._versions[property_id] == version:
            self._states[property_id] = ToggleState.SETTLED
        return self.is_favorited(property_id)

    async def sync_favorites(self) -> bool:
        """Push locally stored favorites to the server after sign-in.

        On success local storage is cleared and the list reloaded from the
        server.  On failure local storage is left intact for a later retry.
        """

        if not self.authenticated:
            return False

        local_ids = self._storage.load()
        if local_ids:
            try:
                synced = await self._api.sync_favorites(local_ids)
            except ApiError as exc:
                logger.warning(f"Favorites sync failed, keeping {len(local_ids)} local ids: {exc}")
                return False
            logger.info(f"Synced {synced} favorites to the server")
            self._storage.clear()

        await self.load()
        return True

    async def sign_in(self, session_token: str) -> bool:
        self.session_token = session_token
        if self._api is not None:
            self._api.session_token = session_token
        return await self.sync_favorites()

    def sign_out(self) -> None:
        self.session_token = None
        if self._api is not None:
            self._api.session_token = None


__all__ = [
    "FavoritesCoordinator",
    "JsonFileFavoritesStorage",
    "LocalFavoritesStorage",
    "MemoryFavoritesStorage",
    "ToggleState",
]
