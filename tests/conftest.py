"""Shared pytest fixtures for catalog tests."""

from __future__ import annotations

from datetime import datetime, timedelta
import itertools

import pytest

from core.models import Entry, Tag
from core.services.library_store import LibraryStore

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture()
def make_tag():
    counter = itertools.count(1)

    def _make(name: str, minutes: int = 0, color: str = "#f4a261", tag_id: int | None = None) -> Tag:
        return Tag(
            id=tag_id if tag_id is not None else next(counter),
            name=name,
            color=color,
            created_at=BASE_TIME + timedelta(minutes=minutes),
        )

    return _make


@pytest.fixture()
def make_entry():
    counter = itertools.count(1)

    def _make(file_path: str, minutes: int = 0, entry_id: int | None = None, **fields) -> Entry:
        return Entry(
            id=entry_id if entry_id is not None else next(counter),
            file_path=file_path,
            created_at=BASE_TIME + timedelta(minutes=minutes),
            **fields,
        )

    return _make


@pytest.fixture()
def tags(make_tag):
    return {
        "action": make_tag("action", 1),
        "comedy": make_tag("comedy", 2),
        "drama": make_tag("drama", 3),
    }


@pytest.fixture()
def entries(make_entry, tags):
    """Five entries A..E created one minute apart (A oldest)."""
    return [
        make_entry("/v/a_heist.mkv", 1, title="Alpha Heist", tags=[tags["action"]]),
        make_entry(
            "/v/b_laughs.mkv",
            2,
            title="Bravo",
            notes="very funny",
            tags=[tags["action"], tags["comedy"]],
            watched=True,
        ),
        make_entry("/v/c_tears.mkv", 3, title="Charlie", tags=[tags["drama"]], favorite=True),
        make_entry("/v/d_plain.mkv", 4, title="Delta"),
        make_entry("/v/e_funny.mkv", 5, title="Echo", tags=[tags["comedy"]], watched=True),
    ]


@pytest.fixture()
def store(entries, tags):
    s = LibraryStore()
    s.set_tags(tags.values())
    s.set_entries(entries)
    return s
