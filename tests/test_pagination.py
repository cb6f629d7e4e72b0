"""Tests for query identity and cursor bookkeeping."""

from __future__ import annotations

import pytest

from app.pagination import CursorState, PageCursor, QueryFilter


def test_filters_are_equivalent_only_when_all_fields_match() -> None:
    assert QueryFilter.search("batman") == QueryFilter.search("batman")
    assert QueryFilter.search("batman") != QueryFilter.search("superman")
    assert QueryFilter.discover(genre=28) == QueryFilter.discover(genre=28)
    assert QueryFilter.discover(genre=28) != QueryFilter.discover(genre=28, sort_by="vote_average.desc")
    assert QueryFilter.trending("day") != QueryFilter.trending("week")
    assert hash(QueryFilter.trending("week")) == hash(QueryFilter.trending("week"))


def test_discover_defaults_to_popularity_sort() -> None:
    assert QueryFilter.discover(genre=12).sort_by == "popularity.desc"


def test_trending_rejects_unknown_window() -> None:
    with pytest.raises(ValueError):
        QueryFilter.trending("month")  # type: ignore[arg-type]


def test_merge_appends_only_unseen_ids(make_page) -> None:
    cursor = PageCursor(filter=QueryFilter.search("heat"))

    cursor.begin(1)
    assert cursor.merge(make_page([1, 2, 3], page=1, total_pages=2)) == 3
    cursor.begin(2)
    assert cursor.merge(make_page([3, 4], page=2, total_pages=2)) == 1

    assert [movie.id for movie in cursor.accumulated] == [1, 2, 3, 4]
    assert cursor.pages_loaded == 2


def test_merge_drops_duplicates_within_a_page(make_page) -> None:
    cursor = PageCursor(filter=QueryFilter.search("heat"))
    cursor.begin(1)

    cursor.merge(make_page([5, 5, 6], page=1, total_pages=1))

    assert [movie.id for movie in cursor.accumulated] == [5, 6]


def test_state_transitions_follow_page_metadata(make_page) -> None:
    cursor = PageCursor(filter=QueryFilter.trending())
    assert cursor.state is CursorState.IDLE

    cursor.begin(1)
    assert cursor.is_loading
    cursor.merge(make_page([1], page=1, total_pages=2))
    assert cursor.state is CursorState.HAS_MORE
    assert cursor.next_page == 2
    assert cursor.can_load_more

    cursor.begin(2)
    cursor.merge(make_page([2], page=2, total_pages=2))
    assert cursor.state is CursorState.EXHAUSTED
    assert cursor.next_page is None
    assert not cursor.has_next_page


def test_empty_result_set_is_exhausted(make_page) -> None:
    cursor = PageCursor(filter=QueryFilter.search("zzzzzz"))
    cursor.begin(1)

    cursor.merge(make_page([], page=1, total_pages=0))

    assert cursor.state is CursorState.EXHAUSTED
    assert cursor.accumulated == []


def test_begin_while_loading_is_rejected() -> None:
    cursor = PageCursor(filter=QueryFilter.search("heat"))
    cursor.begin(1)

    with pytest.raises(RuntimeError):
        cursor.begin(1)


def test_fail_records_page_for_retry() -> None:
    cursor = PageCursor(filter=QueryFilter.search("heat"))
    cursor.begin(1)
    error = RuntimeError("boom")

    cursor.fail(1, error)

    assert cursor.state is CursorState.ERROR
    assert cursor.failed_page == 1
    assert cursor.error is error
    assert not cursor.can_load_more
