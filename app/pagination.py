"""Query identity and per-query pagination state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Literal

from .models import Movie, MoviePage, TimeWindow

QueryKind = Literal["search", "discover", "trending"]

DEFAULT_DISCOVER_SORT = "popularity.desc"


@dataclass(frozen=True)
class QueryFilter:
    """Identity of one browse context.

    Two filters are equivalent exactly when every field matches, which is
    what dataclass equality gives us.
    """

    kind: QueryKind
    text: str | None = None
    genre: int | None = None
    time_window: TimeWindow | None = None
    sort_by: str | None = None
    year: int | None = None

    @classmethod
    def search(cls, text: str) -> "QueryFilter":
        return cls(kind="search", text=text)

    @classmethod
    def discover(
        cls,
        *,
        genre: int | None = None,
        year: int | None = None,
        sort_by: str | None = DEFAULT_DISCOVER_SORT,
    ) -> "QueryFilter":
        return cls(kind="discover", genre=genre, year=year, sort_by=sort_by)

    @classmethod
    def trending(
        cls, time_window: TimeWindow = "week", *, sort_by: str | None = None
    ) -> "QueryFilter":
        if time_window not in ("day", "week"):
            raise ValueError("time_window must be 'day' or 'week'")
        return cls(kind="trending", time_window=time_window, sort_by=sort_by)


class CursorState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    HAS_MORE = "has_more"
    EXHAUSTED = "exhausted"
    ERROR = "error"


@dataclass(eq=False)
class PageCursor:
    """Pagination progress for a single :class:`QueryFilter`.

    ``accumulated`` only ever grows, and only with movies whose id has not
    been seen yet, so it keeps first-arrival order across pages.
    """

    filter: QueryFilter
    next_page: int | None = 1
    total_pages: int = 0
    accumulated: list[Movie] = field(default_factory=list)
    state: CursorState = CursorState.IDLE
    error: Exception | None = None
    failed_page: int | None = None
    loading_page: int | None = None
    pages_loaded: int = 0
    _seen: set[int] = field(default_factory=set, init=False, repr=False)

    @property
    def is_loading(self) -> bool:
        return self.state is CursorState.LOADING

    @property
    def has_next_page(self) -> bool:
        return self.next_page is not None

    @property
    def can_load_more(self) -> bool:
        return self.state is CursorState.HAS_MORE

    def begin(self, page: int) -> None:
        """Move into LOADING for ``page``."""

        if self.is_loading:
            raise RuntimeError("Cursor is already loading a page")
        self.state = CursorState.LOADING
        self.loading_page = page
        self.error = None

    def merge(self, payload: MoviePage) -> int:
        """Append unseen movies from ``payload`` and advance; return how many were added."""

        added = self._append(payload.results)
        self.total_pages = payload.total_pages
        self.pages_loaded += 1
        self.loading_page = None
        self.failed_page = None
        if payload.page < payload.total_pages:
            self.next_page = payload.page + 1
            self.state = CursorState.HAS_MORE
        else:
            self.next_page = None
            self.state = CursorState.EXHAUSTED
        return added

    def fail(self, page: int, error: Exception) -> None:
        self.state = CursorState.ERROR
        self.error = error
        self.failed_page = page
        self.loading_page = None

    def _append(self, movies: Iterable[Movie]) -> int:
        added = 0
        for movie in movies:
            if movie.id in self._seen:
                continue
            self._seen.add(movie.id)
            self.accumulated.append(movie)
            added += 1
        return added
