"""Small persisted client preferences stored beside the favorites."""

from __future__ import annotations

import json

from .storage import KeyValueStore
from .utils import load_json_value

RECENT_SEARCHES_KEY = "recentSearches"
LAST_SEARCH_KEY = "lastSearch"
DARK_MODE_KEY = "darkMode"


class Preferences:
    """Recent searches, the last submitted search and the dark-mode flag."""

    def __init__(
        self,
        storage: KeyValueStore,
        *,
        recent_limit: int = 5,
        dark_mode_default: bool = False,
    ) -> None:
        self._storage = storage
        self._recent_limit = recent_limit
        self._dark_mode_default = dark_mode_default

    @property
    def recent_searches(self) -> list[str]:
        payload = load_json_value(
            self._storage.get_item(RECENT_SEARCHES_KEY), key=RECENT_SEARCHES_KEY, default=[]
        )
        if not isinstance(payload, list):
            return []
        return [str(entry) for entry in payload if isinstance(entry, str)][: self._recent_limit]

    def record_search(self, query: str) -> list[str]:
        """Push ``query`` to the front of the recent searches and return them."""

        updated = [query, *(entry for entry in self.recent_searches if entry != query)]
        updated = updated[: self._recent_limit]
        self._storage.set_item(RECENT_SEARCHES_KEY, json.dumps(updated))
        return updated

    @property
    def last_search(self) -> str | None:
        return self._storage.get_item(LAST_SEARCH_KEY) or None

    @last_search.setter
    def last_search(self, value: str) -> None:
        self._storage.set_item(LAST_SEARCH_KEY, value)

    @property
    def dark_mode(self) -> bool:
        raw = self._storage.get_item(DARK_MODE_KEY)
        if raw is None:
            return self._dark_mode_default
        return raw == "true"

    @dark_mode.setter
    def dark_mode(self, enabled: bool) -> None:
        self._storage.set_item(DARK_MODE_KEY, "true" if enabled else "false")

    def toggle_dark_mode(self) -> bool:
        self.dark_mode = not self.dark_mode
        return self.dark_mode
