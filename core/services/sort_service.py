"""Sorting service for catalog entries.

Sorts by a single display column, handling None values and ascending or
descending order without mutating the input sequence.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from core.models import Entry

SORT_COLUMNS = ("title", "created_at", "file_size", "duration")


@dataclass(frozen=True)
class SortSpec:
    """Active sort column and direction."""

    column: str = "created_at"
    ascending: bool = False

    def __post_init__(self) -> None:
        if self.column not in SORT_COLUMNS:
            raise ValueError(f"Unknown sort column: {self.column!r}")

    def toggled(self, column: str) -> SortSpec:
        """Return the new sort order after the user picks `column`.

        Picking the active column flips direction; a new column starts
        descending for `created_at` and ascending otherwise.
        """
        if column == self.column:
            return SortSpec(column, not self.ascending)
        return SortSpec(column, column != "created_at")


class SortService:
    """Provides sorting utilities for entry lists."""

    @staticmethod
    def sort_key(entry: Entry, column: str) -> Any:
        """Comparable value of `entry` for `column`."""
        if column == "title":
            return (entry.title or entry.file_path).lower()
        if column == "created_at":
            return entry.created_at.timestamp() if entry.created_at else 0.0
        value = getattr(entry, column, None)
        return value or 0

    def sort(self, entries: Iterable[Entry], spec: SortSpec | None = None) -> list[Entry]:
        """Return a new list of `entries` ordered by `spec` (stable)."""
        spec = spec or SortSpec()
        return sorted(
            entries,
            key=lambda e: self.sort_key(e, spec.column),
            reverse=not spec.ascending,
        )
