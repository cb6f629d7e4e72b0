"""Favorites state container and its local persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Literal

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import StorageError
from .models import Movie
from .storage import KeyValueStore
from .utils import load_json_value

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favorites"

_MOVIE_LIST = TypeAdapter(list[Movie])

NotificationKind = Literal["added", "removed", "cleared"]


@dataclass(frozen=True, slots=True)
class Notification:
    """User-visible event emitted after a favorites mutation."""

    kind: NotificationKind
    title: str | None = None

    @property
    def heading(self) -> str:
        if self.kind == "added":
            return "Added to favorites"
        if self.kind == "removed":
            return "Removed from favorites"
        return "Favorites cleared"

    @property
    def message(self) -> str:
        if self.kind == "added":
            return f"{self.title} has been added to your favorites."
        if self.kind == "removed":
            return f"{self.title} has been removed from your favorites."
        return "All movies have been removed from your favorites."


class FavoritesStore:
    """Reads and writes the serialized favorites list under a single key."""

    def __init__(self, storage: KeyValueStore, key: str = FAVORITES_KEY) -> None:
        self._storage = storage
        self._key = key

    def load(self) -> list[Movie]:
        """Return persisted favorites, or an empty list when none are readable."""

        payload = load_json_value(self._storage.get_item(self._key), key=self._key, default=[])
        try:
            movies = _MOVIE_LIST.validate_python(payload)
        except PydanticValidationError:
            logger.warning("Persisted favorites are malformed; starting with an empty list")
            return []

        unique: dict[int, Movie] = {}
        for movie in movies:
            unique.setdefault(movie.id, movie)
        return list(unique.values())

    def save(self, movies: Iterable[Movie]) -> None:
        """Rewrite the persisted list in full."""

        serialized = json.dumps([movie.model_dump(mode="json") for movie in movies])
        self._storage.set_item(self._key, serialized)


class FavoritesManager:
    """Insertion-ordered set of favourite movies, unique by id.

    The manager is the only mutator of the set. Each mutating call finishes
    with a synchronous write to the store; if that write fails the in-memory
    set stays authoritative for the rest of the session.
    """

    def __init__(
        self,
        store: FavoritesStore,
        notify: Callable[[Notification], None] | None = None,
    ) -> None:
        self._store = store
        self._notify = notify
        self._movies: dict[int, Movie] = {movie.id: movie for movie in store.load()}

    def add(self, movie: Movie) -> None:
        if movie.id in self._movies:
            return
        self._movies[movie.id] = movie
        self._persist()
        self._emit(Notification(kind="added", title=movie.title))

    def remove(self, movie_id: int) -> None:
        movie = self._movies.pop(movie_id, None)
        if movie is None:
            return
        self._persist()
        self._emit(Notification(kind="removed", title=movie.title))

    def toggle(self, movie: Movie) -> bool:
        """Add or remove ``movie``; return whether it is now a favourite."""

        if self.is_favorite(movie.id):
            self.remove(movie.id)
            return False
        self.add(movie)
        return True

    def clear(self) -> None:
        self._movies = {}
        self._persist()
        self._emit(Notification(kind="cleared"))

    def is_favorite(self, movie_id: int) -> bool:
        return movie_id in self._movies

    def list(self) -> tuple[Movie, ...]:
        return tuple(self._movies.values())

    def __len__(self) -> int:
        return len(self._movies)

    def __iter__(self) -> Iterator[Movie]:
        return iter(self.list())

    def __contains__(self, movie_id: object) -> bool:
        return movie_id in self._movies

    def _persist(self) -> None:
        try:
            self._store.save(self._movies.values())
        except StorageError:
            logger.exception("Failed to persist %d favorites; keeping them in memory", len(self._movies))

    def _emit(self, notification: Notification) -> None:
        if self._notify is not None:
            self._notify(notification)
