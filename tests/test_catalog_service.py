"""Tests for the in-memory catalog collaborator."""

from __future__ import annotations

import asyncio

import pytest

from core.services.interfaces import (
    CatalogError,
    DuplicateTagError,
    EntryNotFoundError,
    TagNotFoundError,
)
from infrastructure.catalog_service import InMemoryCatalogService


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def service():
    svc = InMemoryCatalogService()
    svc.add_entry("/v/one.mkv", title="One")
    svc.add_entry("/v/two.mkv", title="Two")
    return svc


def test_list_entries_returns_copies(service):
    entries = run(service.list_entries())
    entries[0].title = "changed"
    assert run(service.list_entries())[0].title == "One"


def test_create_entries_skips_known_paths(service):
    created = run(service.create_entries(["/v/one.mkv", "/v/three.mkv", "/v/three.mkv"]))
    assert [e.file_path for e in created] == ["/v/three.mkv"]
    assert created[0].id == 3


def test_update_entry_filters_fields_and_validates_rating(service):
    updated = run(service.update_entry(1, {"title": "Uno", "id": 42, "created_at": None}))
    assert updated.id == 1
    assert updated.title == "Uno"
    assert updated.updated_at is not None
    with pytest.raises(CatalogError):
        run(service.update_entry(1, {"rating": 9}))
    with pytest.raises(EntryNotFoundError):
        run(service.update_entry(99, {"title": "x"}))


def test_tags_unique_case_insensitive(service):
    run(service.create_tag("Action", "#ff0000"))
    with pytest.raises(DuplicateTagError):
        run(service.create_tag(" action ", "#00ff00"))
    with pytest.raises(CatalogError):
        run(service.create_tag("   ", "#00ff00"))


def test_attach_detach_and_delete_tag(service):
    tag = run(service.create_tag("drama", "#123456"))
    run(service.attach_tag(1, tag.id))
    assert [t.name for t in run(service.list_entries())[0].tags] == ["drama"]
    run(service.delete_tag(tag.id))
    assert run(service.list_entries())[0].tags == []
    with pytest.raises(TagNotFoundError):
        run(service.attach_tag(1, tag.id))


def test_rename_tag_clash(service):
    a = run(service.create_tag("a", "#000"))
    run(service.create_tag("b", "#000"))
    with pytest.raises(DuplicateTagError):
        run(service.update_tag(a.id, {"name": "B"}))
    renamed = run(service.update_tag(a.id, {"name": "alpha", "color": "#fff"}))
    assert (renamed.name, renamed.color) == ("alpha", "#fff")


def test_delete_entries_is_all_or_nothing(service):
    with pytest.raises(EntryNotFoundError):
        run(service.delete_entries([1, 99]))
    assert len(run(service.list_entries())) == 2
    run(service.delete_entries([1, 2]))
    assert run(service.list_entries()) == []


def test_load_csv(tmp_path):
    csv_path = tmp_path / "seed.csv"
    csv_path.write_text(
        "FilePath,Title,Year,Rating,Notes,Watched,Favorite,FileSize,Duration,Tags\n"
        "/v/a.mkv,A,2001,4,,1,0,100,60.5,action;Comedy\n"
        "/v/b.mkv,B,,9,,0,0,,,\n"
        ",NoPath,,,,,,,,\n"
        "/v/a.mkv,Dup,,,,,,,,\n"
        "/v/c.mkv,C,,,,true,yes,,,comedy\n",
        encoding="utf-8",
    )
    svc = InMemoryCatalogService()
    assert svc.load_csv(csv_path) == 2
    entries = run(svc.list_entries())
    a, c = entries
    assert a.watched and not a.favorite and a.duration == 60.5
    assert [t.name for t in a.tags] == ["action", "Comedy"]
    assert c.watched and c.favorite
    assert [t.name for t in c.tags] == ["Comedy"]
    assert len(run(svc.list_tags())) == 2


def test_load_csv_requires_file_path_header(tmp_path):
    csv_path = tmp_path / "bad.csv"
    csv_path.write_text("Title\nx\n", encoding="utf-8")
    with pytest.raises(ValueError):
        InMemoryCatalogService().load_csv(csv_path)
