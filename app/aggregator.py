"""Accumulates paginated discovery and search results for the active query."""

from __future__ import annotations

import asyncio
import logging

from .errors import NetworkError
from .models import Movie, MoviePage
from .pagination import CursorState, PageCursor, QueryFilter
from .services.provider import MovieDataProvider

logger = logging.getLogger(__name__)


class DiscoveryAggregator:
    """Owns the :class:`PageCursor` of the active :class:`QueryFilter`.

    Only one cursor is live at a time. A response that resolves after its
    cursor has been replaced is dropped, never merged into the new one.
    """

    def __init__(self, provider: MovieDataProvider) -> None:
        self._provider = provider
        self._cursor: PageCursor | None = None

    @property
    def cursor(self) -> PageCursor | None:
        return self._cursor

    @property
    def filter(self) -> QueryFilter | None:
        return self._cursor.filter if self._cursor else None

    @property
    def state(self) -> CursorState:
        return self._cursor.state if self._cursor else CursorState.IDLE

    @property
    def movies(self) -> list[Movie]:
        return list(self._cursor.accumulated) if self._cursor else []

    @property
    def has_next_page(self) -> bool:
        return bool(self._cursor and self._cursor.has_next_page)

    @property
    def can_load_more(self) -> bool:
        return bool(self._cursor and self._cursor.can_load_more)

    @property
    def error(self) -> Exception | None:
        return self._cursor.error if self._cursor else None

    def view(self, genre: int | None = None) -> list[Movie]:
        """Return accumulated movies, optionally narrowed to ``genre`` client-side.

        The narrowing never feeds back into pagination: ``has_next_page``
        keeps following the unfiltered upstream metadata.
        """

        movies = self.movies
        if genre is None:
            return movies
        return [movie for movie in movies if genre in movie.genre_ids]

    async def activate(self, query_filter: QueryFilter) -> bool:
        """Make ``query_filter`` the active query; return whether a fetch was issued."""

        if self._cursor is not None and self._cursor.filter == query_filter:
            return False
        cursor = PageCursor(filter=query_filter)
        self._cursor = cursor
        await self._fetch(cursor, 1)
        return True

    async def load_more(self) -> bool:
        """Fetch the next page when one is available and nothing is in flight."""

        cursor = self._cursor
        if cursor is None or not cursor.can_load_more or cursor.next_page is None:
            return False
        await self._fetch(cursor, cursor.next_page)
        return True

    async def retry(self) -> bool:
        """Re-request the page that failed last; retries are only ever user-initiated."""

        cursor = self._cursor
        if cursor is None or cursor.state is not CursorState.ERROR:
            return False
        page = cursor.failed_page or 1
        await self._fetch(cursor, page)
        return True

    def reset(self) -> None:
        self._cursor = None

    async def _fetch(self, cursor: PageCursor, page: int) -> None:
        cursor.begin(page)
        try:
            payload = await self._request(cursor.filter, page)
        except NetworkError as exc:
            if cursor is not self._cursor:
                logger.debug("Ignoring failure for stale query %s", cursor.filter)
                return
            logger.warning(
                "Fetching page %s for %s query failed: %s", page, cursor.filter.kind, exc
            )
            cursor.fail(page, exc)
            return
        except asyncio.CancelledError:
            logger.info("Fetching page %s for %s query was cancelled", page, cursor.filter.kind)
            cursor.fail(page, NetworkError(f"Fetching page {page} was cancelled"))
            raise
        except Exception as exc:
            logger.error(
                "Fetching page %s for %s query raised unexpectedly: %r",
                page,
                cursor.filter.kind,
                exc,
            )
            cursor.fail(page, exc)
            raise

        if cursor is not self._cursor:
            logger.debug("Discarding stale page %s for %s", page, cursor.filter)
            return
        added = cursor.merge(payload)
        logger.debug(
            "Merged page %s/%s for %s query (%d new movies)",
            payload.page,
            payload.total_pages,
            cursor.filter.kind,
            added,
        )

    async def _request(self, query_filter: QueryFilter, page: int) -> MoviePage:
        if query_filter.kind == "search":
            return await self._provider.search(query_filter.text or "", page)
        if query_filter.kind == "discover":
            return await self._provider.discover(
                genre=query_filter.genre,
                year=query_filter.year,
                sort_by=query_filter.sort_by,
                page=page,
            )
        if query_filter.kind == "trending":
            return await self._provider.trending(query_filter.time_window or "week", page)
        raise ValueError(f"Unsupported query kind: {query_filter.kind}")
