"""Tests for the library store: derivation, mutations and reconciliation."""

from __future__ import annotations

import pytest

from core.models import Tag, tag_category
from core.services.interfaces import DuplicateTagError, EntryNotFoundError, TagNotFoundError
from core.services.library_store import LibraryStore
from core.services.sort_service import SortSpec


def _titles(store):
    return [e.title for e in store.displayed]


def test_default_order_is_newest_first(store):
    assert _titles(store) == ["Echo", "Delta", "Charlie", "Bravo", "Alpha Heist"]


def test_tags_kept_sorted_by_name(store):
    store.add_tag(Tag(id=10, name="Biography"))
    assert [t.name for t in store.tags] == ["action", "Biography", "comedy", "drama"]


def test_query_and_category_read_after_write(store):
    store.set_query("funny")
    assert _titles(store) == ["Echo", "Bravo"]
    store.set_category("unwatched")
    assert _titles(store) == []
    store.set_query("")
    assert _titles(store) == ["Delta", "Charlie", "Alpha Heist"]


def test_sort_toggle(store):
    store.toggle_sort("title")
    assert _titles(store) == ["Alpha Heist", "Bravo", "Charlie", "Delta", "Echo"]
    store.toggle_sort("title")
    assert _titles(store)[0] == "Echo"


def test_filter_change_reconciles_selection(store):
    store.select_all()
    store.set_category("watched")
    assert set(store.selection.selected_ids) == {2, 5}
    store.set_category("favorites")
    # Charlie was deselected when the watched filter hid it
    assert store.selection.selected_ids == []


def test_entry_no_longer_matching_is_deselected(store):
    store.set_category("unwatched")
    idx = store.index_of(4)
    store.click(4, idx)
    store.update_entry(4, watched=True)
    assert store.selection.selected_ids == []
    assert store.selection.state.anchor is None


def test_removed_entries_leave_selection(store):
    store.select_all()
    store.remove_entries([1, 3])
    assert set(store.selection.selected_ids) == {2, 4, 5}
    assert store.get_entry(1) is None
    store.remove_entry(2)
    assert 2 not in store.selection.selected_ids


def test_shift_range_uses_displayed_order(store):
    # displayed: E D C B A
    store.click(4, 1)
    store.click(2, 3, shift=True)
    assert set(store.selection.selected_ids) == {4, 3, 2}
    store.click(5, 0, shift=True)
    assert set(store.selection.selected_ids) == {5, 4}


def test_update_entry_validates(store):
    with pytest.raises(ValueError):
        store.update_entry(1, id=99)
    with pytest.raises(EntryNotFoundError):
        store.update_entry(999, title="x")


def test_tag_name_unique_case_insensitive(store):
    with pytest.raises(DuplicateTagError):
        store.add_tag(Tag(id=10, name="ACTION"))
    with pytest.raises(DuplicateTagError):
        store.update_tag(2, name="Drama")
    store.update_tag(2, name="Comedy")
    assert store.get_tag(2).name == "Comedy"


def test_update_tag_refreshes_entry_snapshots(store):
    store.update_tag(1, name="thriller", color="#000000")
    bravo = store.get_entry(2)
    assert [t.name for t in bravo.tags] == ["thriller", "comedy"]
    store.set_query("thriller")
    assert _titles(store) == ["Bravo", "Alpha Heist"]


def test_remove_tag_strips_entries_and_resets_category(store):
    store.set_category(tag_category(3))
    assert _titles(store) == ["Charlie"]
    store.remove_tag(3)
    assert store.filter_spec.category == "all"
    assert store.get_entry(3).tags == []
    assert store.get_tag(3) is None
    assert len(store.displayed) == 5


def test_attach_and_detach(store):
    store.attach_tag(4, 3)
    assert [t.name for t in store.get_entry(4).tags] == ["drama"]
    store.attach_tag(4, 3)
    assert len(store.get_entry(4).tags) == 1
    store.detach_tag(4, 3)
    assert store.get_entry(4).tags == []
    with pytest.raises(TagNotFoundError):
        store.attach_tag(4, 99)


def test_common_tags_and_primary(store):
    store.click(2, store.index_of(2))
    assert store.primary_selection.id == 2
    store.click(1, store.index_of(1), ctrl=True)
    assert store.primary_selection is None
    assert [t.name for t in store.common_tags()] == ["action"]


def test_filter_titles(store):
    assert store.filter_title() == "All Movies"
    store.set_category("favorites")
    assert store.filter_title() == "Favorite Movies"
    store.set_category(tag_category(2))
    assert store.filter_title() == "Tagged: comedy"


def test_tag_suggestions_exclude_attached(store):
    names = [t.name for t in store.tag_suggestions("c", exclude_ids=[2])]
    assert "comedy" not in names
    assert names == ["action"]


def test_view_mode_validation():
    s = LibraryStore(default_sort=SortSpec("title", True))
    s.set_view_mode("list")
    assert s.view_mode == "list"
    with pytest.raises(ValueError):
        s.set_view_mode("cards")


def test_displayed_is_a_copy(store):
    shown = store.displayed
    shown.clear()
    assert len(store.displayed) == 5
