"""Lightweight view model wrapper around `Entry`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PureWindowsPath

from core.models import Entry

MAX_TAG_DOTS = 3


def format_file_size(size: int | None) -> str:
    if not size:
        return "-"
    units = ["B", "KB", "MB", "GB"]
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(units) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {units[unit]}"


def format_duration(seconds: float | None) -> str:
    if not seconds:
        return "-"
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@dataclass
class EntryVM:
    """Expose convenient properties for bindings/templates."""

    entry: Entry

    @property
    def file_name(self) -> str:
        """Base name of the file path (handles both separators)."""
        return PureWindowsPath(self.entry.file_path).name

    @property
    def display_title(self) -> str:
        return self.entry.title or "Untitled"

    @property
    def poster_path(self) -> str | None:
        """External poster if linked, else the generated thumbnail."""
        return self.entry.tmdb_poster_path or self.entry.thumbnail_path

    @property
    def tag_colors(self) -> list[str]:
        return [t.color for t in self.entry.tags[:MAX_TAG_DOTS]]

    @property
    def extra_tag_count(self) -> int:
        return max(0, len(self.entry.tags) - MAX_TAG_DOTS)

    @property
    def size_text(self) -> str:
        return format_file_size(self.entry.file_size)

    @property
    def duration_text(self) -> str:
        return format_duration(self.entry.duration)

    @property
    def tags_text(self) -> str:
        return ", ".join(t.name for t in self.entry.tags)

    def list_row(self) -> list[str]:
        """Cell texts for the list view, in LIST_HEADERS order."""
        year = str(self.entry.year) if self.entry.year else ""
        return [self.display_title, year, self.size_text, self.duration_text, self.tags_text]
