"""Pytest configuration and test helpers."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``app`` sits
# at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.errors import NetworkError  # noqa: E402
from app.models import Movie, MoviePage  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


def movie_page(ids: list[int], *, page: int = 1, total_pages: int = 1, genres: dict[int, list[int]] | None = None) -> MoviePage:
    """Build a page of stub movies with the given ids."""

    genres = genres or {}
    return MoviePage(
        page=page,
        total_pages=total_pages,
        total_results=len(ids),
        results=[
            Movie(id=movie_id, title=f"Movie {movie_id}", genre_ids=genres.get(movie_id, []))
            for movie_id in ids
        ],
    )


class ScriptedProvider:
    """In-memory movie-data provider whose responses can be held back.

    Responses are keyed by ``(kind, query, page)`` where ``query`` is the
    search text, the genre id, or the time window. ``hold`` makes the matching
    request wait until ``release`` is called so tests can interleave calls.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, Any, int], MoviePage | Exception] = {}
        self.calls: list[tuple[str, Any, int]] = []
        self._gates: dict[tuple[str, Any, int], asyncio.Event] = {}

    def respond(self, kind: str, query: Any, page: int, result: MoviePage | Exception) -> None:
        self.responses[(kind, query, page)] = result

    def hold(self, kind: str, query: Any, page: int) -> None:
        self._gates[(kind, query, page)] = asyncio.Event()

    def release(self, kind: str, query: Any, page: int) -> None:
        self._gates[(kind, query, page)].set()

    async def _answer(self, key: tuple[str, Any, int]) -> MoviePage:
        self.calls.append(key)
        gate = self._gates.get(key)
        if gate is not None:
            await gate.wait()
        result = self.responses.get(key)
        if result is None:
            raise NetworkError(f"No scripted response for {key}", status_code=500)
        if isinstance(result, Exception):
            raise result
        return result

    async def trending(self, time_window: str, page: int = 1) -> MoviePage:
        return await self._answer(("trending", time_window, page))

    async def search(self, query: str, page: int = 1) -> MoviePage:
        return await self._answer(("search", query, page))

    async def discover(
        self,
        *,
        genre: int | None = None,
        year: int | None = None,
        sort_by: str | None = None,
        page: int = 1,
    ) -> MoviePage:
        return await self._answer(("discover", genre, page))

    async def similar(self, movie_id: int, page: int = 1) -> MoviePage:
        return await self._answer(("similar", movie_id, page))


@pytest.fixture
def provider() -> ScriptedProvider:
    return ScriptedProvider()


@pytest.fixture
def make_page():
    return movie_page
