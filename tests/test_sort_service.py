"""Tests for entry sorting."""

from __future__ import annotations

import pytest

from core.services.sort_service import SortService, SortSpec


@pytest.fixture()
def items(make_entry):
    return [
        make_entry("/v/zeta.mkv", 3, title=None, file_size=300, duration=None),
        make_entry("/v/b.mkv", 1, title="beta", file_size=None, duration=50.0),
        make_entry("/v/a.mkv", 2, title="Alpha", file_size=100, duration=20.0),
    ]


def _paths(result):
    return [e.file_path for e in result]


def test_default_is_newest_first(items):
    assert _paths(SortService().sort(items)) == ["/v/zeta.mkv", "/v/a.mkv", "/v/b.mkv"]


def test_title_falls_back_to_path_case_insensitive(items):
    result = SortService().sort(items, SortSpec("title", True))
    assert _paths(result) == ["/v/zeta.mkv", "/v/a.mkv", "/v/b.mkv"]


def test_missing_numbers_sort_as_zero(items):
    result = SortService().sort(items, SortSpec("file_size", True))
    assert _paths(result) == ["/v/b.mkv", "/v/a.mkv", "/v/zeta.mkv"]
    result = SortService().sort(items, SortSpec("duration", False))
    assert _paths(result) == ["/v/b.mkv", "/v/a.mkv", "/v/zeta.mkv"]


def test_sort_returns_new_list(items):
    before = list(items)
    SortService().sort(items, SortSpec("title", True))
    assert items == before


def test_toggle_rules():
    spec = SortSpec()
    assert spec.toggled("created_at") == SortSpec("created_at", True)
    assert spec.toggled("title") == SortSpec("title", True)
    assert SortSpec("title", True).toggled("created_at") == SortSpec("created_at", False)


def test_unknown_column_rejected():
    with pytest.raises(ValueError):
        SortSpec("rating")
