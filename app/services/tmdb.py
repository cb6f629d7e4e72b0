"""Client for The Movie Database (TMDB) used by the proxy routes."""

from __future__ import annotations

from typing import Any

import httpx

from ..config import Settings
from ..models import Credits, GenreList, MovieDetail, MoviePage, TimeWindow, VideoList
from .provider import JSONAPIClient


class TMDBClient(JSONAPIClient):
    """Forwards movie-data requests to TMDB with the server-side API key."""

    _label = "TMDb API"

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        if not settings.tmdb_api_key:
            raise ValueError("TMDB API key is required when initialising TMDBClient")
        super().__init__(http_client)
        self._settings = settings

    def _default_params(self) -> dict[str, Any]:
        return {
            "api_key": self._settings.tmdb_api_key,
            "language": self._settings.tmdb_language,
        }

    async def trending(self, time_window: TimeWindow, page: int = 1) -> MoviePage:
        if time_window not in ("day", "week"):
            raise ValueError("time_window must be 'day' or 'week'")
        return await self._get(
            f"/trending/movie/{time_window}", MoviePage, params={"page": page}
        )

    async def search(self, query: str, page: int = 1) -> MoviePage:
        params = {"query": query, "page": page, "include_adult": "false"}
        return await self._get("/search/movie", MoviePage, params=params)

    async def discover(
        self,
        *,
        genre: int | None = None,
        year: int | None = None,
        sort_by: str | None = None,
        page: int = 1,
    ) -> MoviePage:
        params: dict[str, Any] = {"page": page}
        if genre:
            params["with_genres"] = genre
        if year:
            params["primary_release_year"] = year
        if sort_by:
            params["sort_by"] = sort_by
        return await self._get("/discover/movie", MoviePage, params=params)

    async def movie_detail(self, movie_id: int) -> MovieDetail:
        return await self._get(
            f"/movie/{movie_id}", MovieDetail, resource=("Movie", movie_id)
        )

    async def credits(self, movie_id: int) -> Credits:
        return await self._get(
            f"/movie/{movie_id}/credits", Credits, resource=("Movie", movie_id)
        )

    async def videos(self, movie_id: int) -> VideoList:
        return await self._get(
            f"/movie/{movie_id}/videos", VideoList, resource=("Movie", movie_id)
        )

    async def similar(self, movie_id: int, page: int = 1) -> MoviePage:
        return await self._get(
            f"/movie/{movie_id}/similar",
            MoviePage,
            params={"page": page},
            resource=("Movie", movie_id),
        )

    async def genres(self) -> GenreList:
        return await self._get("/genre/movie/list", GenreList)
