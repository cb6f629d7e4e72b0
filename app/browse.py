"""Browse session tying search, genre and trending contexts to the aggregator."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .aggregator import DiscoveryAggregator
from .config import Settings
from .errors import StorageError, ValidationError
from .models import Credits, Movie, MovieDetail, TimeWindow, Video, VideoList
from .pagination import QueryFilter
from .preferences import Preferences
from .scroll import ScrollTriggerCoordinator
from .services.provider import MovieDataProvider

logger = logging.getLogger(__name__)


def validate_search_query(query: str | None, *, min_length: int = 3) -> str:
    """Return the trimmed query or raise :class:`ValidationError`."""

    cleaned = (query or "").strip()
    if not cleaned:
        raise ValidationError("Search query is required", field="query")
    if len(cleaned) < min_length:
        raise ValidationError(
            f"Search query must be at least {min_length} characters", field="query"
        )
    return cleaned


@dataclass(slots=True)
class MovieDetailsView:
    """Everything the movie detail view shows."""

    detail: MovieDetail
    credits: Credits
    videos: VideoList
    similar: list[Movie]

    @property
    def trailer(self) -> Video | None:
        return self.videos.trailer()

    @property
    def directors(self) -> list[str]:
        return [member.name for member in self.credits.directors()]


class BrowseSession:
    """One user's browsing state: the active listing plus persisted preferences."""

    def __init__(
        self,
        provider: MovieDataProvider,
        preferences: Preferences,
        settings: Settings,
    ) -> None:
        self._provider = provider
        self._preferences = preferences
        self._settings = settings
        self.aggregator = DiscoveryAggregator(provider)
        self.scroll = ScrollTriggerCoordinator(self.aggregator)

    @property
    def preferences(self) -> Preferences:
        return self._preferences

    async def search(self, query: str) -> bool:
        cleaned = validate_search_query(query, min_length=self._settings.min_search_length)
        try:
            self._preferences.last_search = cleaned
            self._preferences.record_search(cleaned)
        except StorageError:
            logger.exception("Failed to save search history; continuing with the search")
        return await self._activate(QueryFilter.search(cleaned))

    async def browse_genre(self, genre_id: int, *, year: int | None = None) -> bool:
        return await self._activate(QueryFilter.discover(genre=genre_id, year=year))

    async def trending(
        self, time_window: TimeWindow = "week", *, sort_by: str | None = None
    ) -> bool:
        return await self._activate(QueryFilter.trending(time_window, sort_by=sort_by))

    def visible_movies(self, genre: int | None = None) -> list[Movie]:
        return self.aggregator.view(genre)

    def on_scroll(self, near_end: bool) -> asyncio.Task[bool] | None:
        return self.scroll.signal(near_end)

    async def retry(self) -> bool:
        return await self.aggregator.retry()

    async def load_details(self, movie_id: int) -> MovieDetailsView:
        detail, credits, videos, similar = await asyncio.gather(
            self._provider.movie_detail(movie_id),
            self._provider.credits(movie_id),
            self._provider.videos(movie_id),
            self._provider.similar(movie_id),
        )
        return MovieDetailsView(
            detail=detail, credits=credits, videos=videos, similar=similar.results
        )

    async def _activate(self, query_filter: QueryFilter) -> bool:
        if self.aggregator.filter != query_filter:
            self.scroll.reset()
        return await self.aggregator.activate(query_filter)
