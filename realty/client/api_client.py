"""Async HTTP client for the realty API used by the favorites coordinator."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class ApiError(Exception):
    """Raised for non-2xx responses and transport failures."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


class RealtyApiClient:
    """Thin wrapper around :class:`httpx.AsyncClient`.

    Every call carries the configured timeout.  GET requests are retried once
    on timeouts or transport errors; POST and DELETE are sent exactly once.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        session_token: str | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session_token = session_token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RealtyApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.session_token:
            headers["Authorization"] = f"Bearer {self.session_token}"
        return headers

    @staticmethod
    def _handle_response(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            data = {"error": response.text}
        if not isinstance(data, dict):
            data = {"data": data}

        if response.is_error:
            message = data.get("error") or f"HTTP {response.status_code}"
            raise ApiError(str(message), status_code=response.status_code, response_data=data)
        return data

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        attempts = 2 if method == "GET" else 1
        last_error: httpx.TransportError | None = None
        for _ in range(attempts):
            try:
                response = await self._client.request(
                    method, path, headers=self._headers(), **kwargs
                )
            except httpx.TransportError as exc:
                # TimeoutException is a TransportError subclass
                logger.info(f"{method} {path} failed with {type(exc).__name__}")
                last_error = exc
                continue
            return self._handle_response(response)
        raise ApiError(f"{method} {path} failed: {type(last_error).__name__}") from last_error

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """Log in and remember the returned session token."""

        data = await self._request("POST", "/api/auth/login", json={"email": email, "password": password})
        self.session_token = data.get("sessionToken")
        return data

    async def me(self) -> dict[str, Any]:
        data = await self._request("GET", "/api/auth/me")
        return data["user"]

    async def list_favorites(self) -> list[int]:
        """Return favorited property ids, newest first."""

        data = await self._request("GET", "/api/favorites")
        return [int(item["id"]) for item in data.get("favorites", [])]

    async def add_favorite(self, property_id: int) -> None:
        await self._request("POST", "/api/favorites", json={"propertyId": property_id})

    async def remove_favorite(self, property_id: int) -> None:
        await self._request("DELETE", f"/api/favorites/{property_id}")

    async def sync_favorites(self, favorite_ids: list[int]) -> int:
        data = await self._request(
            "POST", "/api/favorites/sync", json={"favoriteIds": list(favorite_ids)}
        )
        return int(data.get("synced", 0))


__all__ = ["ApiError", "DEFAULT_TIMEOUT_SECONDS", "RealtyApiClient"]
