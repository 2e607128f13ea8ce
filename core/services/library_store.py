"""In-memory library state: entries, tags, view criteria and selection.

`LibraryStore` is the single writer for catalog state. Every mutation that
can change what is displayed recomputes the displayed list (filter, then
sort) and reconciles the selection before returning, so a read right after a
write always sees consistent state.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from loguru import logger

from core.models import (
    CATEGORY_ALL,
    CATEGORY_FAVORITES,
    CATEGORY_UNTAGGED,
    CATEGORY_UNWATCHED,
    CATEGORY_WATCHED,
    ENTRY_UPDATE_FIELDS,
    Entry,
    FilterSpec,
    Tag,
    parse_category,
    tag_category,
)
from core.services.filter_service import apply_filter
from core.services.fuzzy_search import fuzzy_search_tags
from core.services.interfaces import DuplicateTagError, EntryNotFoundError, TagNotFoundError
from core.services.selection_service import SelectionService
from core.services.sort_service import SortService, SortSpec

VIEW_MODES = ("grid", "list")

_FILTER_TITLES = {
    CATEGORY_ALL: "All Movies",
    CATEGORY_UNTAGGED: "Untagged Movies",
    CATEGORY_WATCHED: "Watched Movies",
    CATEGORY_UNWATCHED: "Unwatched Movies",
    CATEGORY_FAVORITES: "Favorite Movies",
}


def _tag_sort_key(tag: Tag) -> str:
    return tag.name.lower()


class LibraryStore:
    """Explicit state container for the catalog view."""

    def __init__(
        self,
        sorter: SortService | None = None,
        default_sort: SortSpec | None = None,
    ) -> None:
        self._sorter = sorter or SortService()
        self._entries: list[Entry] = []
        self._tags: list[Tag] = []
        self._filter = FilterSpec()
        self._sort = default_sort or SortSpec()
        self._displayed: list[Entry] = []
        self.selection = SelectionService()
        self.view_mode = "grid"

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def entries(self) -> list[Entry]:
        return list(self._entries)

    @property
    def tags(self) -> list[Tag]:
        return list(self._tags)

    @property
    def filter_spec(self) -> FilterSpec:
        return self._filter

    @property
    def sort_spec(self) -> SortSpec:
        return self._sort

    @property
    def displayed(self) -> list[Entry]:
        """Filtered and sorted entries, in display order."""
        return list(self._displayed)

    @property
    def displayed_ids(self) -> list[int]:
        return [e.id for e in self._displayed]

    def get_entry(self, entry_id: int) -> Entry | None:
        for e in self._entries:
            if e.id == entry_id:
                return e
        return None

    def get_tag(self, tag_id: int) -> Tag | None:
        for t in self._tags:
            if t.id == tag_id:
                return t
        return None

    def find_tag_by_name(self, name: str) -> Tag | None:
        lowered = name.strip().lower()
        for t in self._tags:
            if t.name.lower() == lowered:
                return t
        return None

    def tag_suggestions(self, query: str, exclude_ids: Iterable[int] = ()) -> list[Tag]:
        """Tags ranked by fuzzy relevance, skipping `exclude_ids`."""
        excluded = set(exclude_ids)
        return fuzzy_search_tags((t for t in self._tags if t.id not in excluded), query)

    def filter_title(self) -> str:
        kind, tag_id = parse_category(self._filter.category)
        if kind == "tag":
            tag = self.get_tag(tag_id)
            return f"Tagged: {tag.name}" if tag else "Movies"
        return _FILTER_TITLES[kind]

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def click(self, entry_id: int, index: int, shift: bool = False, ctrl: bool = False) -> None:
        self.selection.click(entry_id, index, self.displayed_ids, shift=shift, ctrl=ctrl)

    def select_all(self) -> None:
        self.selection.select_all(self.displayed_ids)

    def clear_selection(self) -> None:
        self.selection.clear()

    def selected_entries(self) -> list[Entry]:
        by_id = {e.id: e for e in self._entries}
        return [by_id[i] for i in self.selection.selected_ids if i in by_id]

    @property
    def primary_selection(self) -> Entry | None:
        """The entry shown in a details panel: set only for single selection."""
        selected = self.selected_entries()
        return selected[0] if len(selected) == 1 else None

    def common_tags(self) -> list[Tag]:
        """Tags attached to every selected entry, in the first entry's order."""
        selected = self.selected_entries()
        if not selected:
            return []
        rest = [e.tag_ids for e in selected[1:]]
        return [t for t in selected[0].tags if all(t.id in ids for ids in rest)]

    # ------------------------------------------------------------------
    # View criteria
    # ------------------------------------------------------------------

    def set_category(self, category: str) -> None:
        parse_category(category)
        self._filter = replace(self._filter, category=category)
        self.refresh()

    def set_query(self, query: str) -> None:
        self._filter = replace(self._filter, query=query or "")
        self.refresh()

    def set_sort(self, spec: SortSpec) -> None:
        self._sort = spec
        self.refresh()

    def toggle_sort(self, column: str) -> None:
        self.set_sort(self._sort.toggled(column))

    def set_view_mode(self, mode: str) -> None:
        if mode not in VIEW_MODES:
            raise ValueError(f"Unknown view mode: {mode!r}")
        self.view_mode = mode

    # ------------------------------------------------------------------
    # Entry mutations
    # ------------------------------------------------------------------

    def set_entries(self, entries: Iterable[Entry]) -> None:
        self._entries = list(entries)
        self.refresh()

    def add_entries(self, entries: Iterable[Entry]) -> None:
        known = {e.id for e in self._entries}
        self._entries.extend(e for e in entries if e.id not in known)
        self.refresh()

    def update_entry(self, entry_id: int, **fields: Any) -> Entry:
        """Apply a partial update and return the new entry."""
        unknown = set(fields) - ENTRY_UPDATE_FIELDS - {"updated_at"}
        if unknown:
            raise ValueError(f"Fields cannot be updated: {sorted(unknown)}")
        for pos, e in enumerate(self._entries):
            if e.id == entry_id:
                updated = replace(e, **fields)
                self._entries[pos] = updated
                self.refresh()
                return updated
        raise EntryNotFoundError(entry_id)

    def replace_entry(self, entry: Entry) -> None:
        """Swap in a fresh copy of an entry (e.g. as returned by the catalog)."""
        for pos, e in enumerate(self._entries):
            if e.id == entry.id:
                self._entries[pos] = entry
                self.refresh()
                return
        raise EntryNotFoundError(entry.id)

    def remove_entry(self, entry_id: int) -> None:
        self.remove_entries([entry_id])

    def remove_entries(self, entry_ids: Iterable[int]) -> None:
        removed = set(entry_ids)
        if not removed:
            return
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id not in removed]
        logger.info("Removed {} entries from library", before - len(self._entries))
        self.refresh()

    # ------------------------------------------------------------------
    # Tag mutations
    # ------------------------------------------------------------------

    def set_tags(self, tags: Iterable[Tag]) -> None:
        self._tags = sorted(tags, key=_tag_sort_key)
        self.refresh()

    def _check_unique_name(self, name: str, tag_id: int | None = None) -> None:
        clash = self.find_tag_by_name(name)
        if clash is not None and clash.id != tag_id:
            raise DuplicateTagError(name)

    def add_tag(self, tag: Tag) -> None:
        self._check_unique_name(tag.name, tag.id)
        self._tags = sorted([*self._tags, tag], key=_tag_sort_key)
        self.refresh()

    def update_tag(self, tag_id: int, **fields: Any) -> Tag:
        """Rename or recolor a tag and refresh the snapshots held by entries."""
        current = self.get_tag(tag_id)
        if current is None:
            raise TagNotFoundError(tag_id)
        if "name" in fields:
            self._check_unique_name(fields["name"], tag_id)
        updated = replace(current, **{k: v for k, v in fields.items() if k in ("name", "color")})
        self._tags = sorted(
            [updated if t.id == tag_id else t for t in self._tags], key=_tag_sort_key
        )
        self._entries = [self._swap_tag(e, updated) for e in self._entries]
        self.refresh()
        return updated

    @staticmethod
    def _swap_tag(entry: Entry, tag: Tag) -> Entry:
        if tag.id not in entry.tag_ids:
            return entry
        return replace(entry, tags=[tag if t.id == tag.id else t for t in entry.tags])

    def remove_tag(self, tag_id: int) -> None:
        """Delete a tag, strip it from every entry, and leave its category."""
        self._tags = [t for t in self._tags if t.id != tag_id]
        self._entries = [
            replace(e, tags=[t for t in e.tags if t.id != tag_id]) if tag_id in e.tag_ids else e
            for e in self._entries
        ]
        if self._filter.category == tag_category(tag_id):
            logger.info("Active tag {} removed; switching to all entries", tag_id)
            self._filter = replace(self._filter, category=CATEGORY_ALL)
        self.refresh()

    def attach_tag(self, entry_id: int, tag_id: int) -> None:
        tag = self.get_tag(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)
        entry = self.get_entry(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        if tag_id in entry.tag_ids:
            return
        tags = sorted([*entry.tags, tag], key=_tag_sort_key)
        self.replace_entry(replace(entry, tags=tags))

    def detach_tag(self, entry_id: int, tag_id: int) -> None:
        entry = self.get_entry(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        if tag_id not in entry.tag_ids:
            return
        self.replace_entry(replace(entry, tags=[t for t in entry.tags if t.id != tag_id]))

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        """Recompute the displayed list and reconcile the selection."""
        filtered = apply_filter(self._entries, self._tags, self._filter)
        self._displayed = self._sorter.sort(filtered, self._sort)
        self.selection.reconcile(self.displayed_ids, (e.id for e in self._entries))

    def index_of(self, entry_id: int) -> int | None:
        for pos, e in enumerate(self._displayed):
            if e.id == entry_id:
                return pos
        return None
