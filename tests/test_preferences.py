"""Tests for persisted client preferences."""

from __future__ import annotations

import json

from app.preferences import Preferences
from app.storage import MemoryStorage


def test_recent_searches_are_deduplicated_most_recent_first() -> None:
    storage = MemoryStorage()
    preferences = Preferences(storage)

    for query in ("alien", "heat", "alien", "dune"):
        preferences.record_search(query)

    assert preferences.recent_searches == ["dune", "alien", "heat"]
    assert json.loads(storage.get_item("recentSearches")) == ["dune", "alien", "heat"]


def test_recent_searches_are_capped() -> None:
    preferences = Preferences(MemoryStorage(), recent_limit=5)

    for index in range(8):
        preferences.record_search(f"query {index}")

    assert preferences.recent_searches == [f"query {index}" for index in (7, 6, 5, 4, 3)]


def test_unreadable_recent_searches_read_as_empty() -> None:
    assert Preferences(MemoryStorage({"recentSearches": "oops"})).recent_searches == []
    assert Preferences(MemoryStorage({"recentSearches": '{"a": 1}'})).recent_searches == []


def test_last_search_round_trip() -> None:
    preferences = Preferences(MemoryStorage())
    assert preferences.last_search is None

    preferences.last_search = "blade runner"

    assert preferences.last_search == "blade runner"


def test_dark_mode_uses_string_flags_and_default() -> None:
    storage = MemoryStorage()
    preferences = Preferences(storage, dark_mode_default=True)
    assert preferences.dark_mode is True

    preferences.dark_mode = False
    assert storage.get_item("darkMode") == "false"
    assert preferences.toggle_dark_mode() is True
    assert storage.get_item("darkMode") == "true"
