"""Async client for the favorites API."""

from realty.client.api_client import ApiError, RealtyApiClient
from realty.client.favorites import (
    FavoritesCoordinator,
    JsonFileFavoritesStorage,
    LocalFavoritesStorage,
    MemoryFavoritesStorage,
    ToggleState,
)

__all__ = [
    "ApiError",
    "FavoritesCoordinator",
    "JsonFileFavoritesStorage",
    "LocalFavoritesStorage",
    "MemoryFavoritesStorage",
    "RealtyApiClient",
    "ToggleState",
]
