"""Composition root for the browsing client."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Callable

import httpx

from .browse import BrowseSession
from .config import Settings, settings as default_settings
from .favorites import FavoritesManager, FavoritesStore, Notification
from .preferences import Preferences
from .services.provider import ProxyMovieClient, ProxySessionClient
from .storage import JSONFileStorage, KeyValueStore


@dataclass(slots=True)
class CineScopeClient:
    """Everything one browsing session needs, sharing a single HTTP client."""

    movies: ProxyMovieClient
    auth: ProxySessionClient
    favorites: FavoritesManager
    preferences: Preferences
    browse: BrowseSession


@asynccontextmanager
async def open_client(
    settings: Settings | None = None,
    *,
    storage: KeyValueStore | None = None,
    notify: Callable[[Notification], None] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[CineScopeClient]:
    """Yield a :class:`CineScopeClient` talking to the configured proxy."""

    resolved = settings or default_settings
    local_storage = storage if storage is not None else JSONFileStorage(resolved.favorites_path)
    preferences = Preferences(
        local_storage,
        recent_limit=resolved.recent_search_limit,
        dark_mode_default=resolved.dark_mode_default,
    )

    async with httpx.AsyncClient(
        base_url=str(resolved.proxy_url),
        timeout=httpx.Timeout(20.0, connect=10.0),
        transport=transport,
    ) as http_client:
        movies = ProxyMovieClient(http_client)
        yield CineScopeClient(
            movies=movies,
            auth=ProxySessionClient(http_client),
            favorites=FavoritesManager(FavoritesStore(local_storage), notify=notify),
            preferences=preferences,
            browse=BrowseSession(movies, preferences, resolved),
        )
