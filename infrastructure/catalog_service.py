"""In-memory catalog collaborator with CSV seeding.

Implements the asynchronous `ICatalogService` protocol over plain Python
collections. Tag names are unique case-insensitively; deleting a tag detaches
it from every entry. Returned objects are copies, so callers only see changes
through the library store.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator, Sequence
import copy
import csv
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from core.models import DEFAULT_TAG_COLOR, ENTRY_UPDATE_FIELDS, Entry, Tag
from core.services.interfaces import (
    CatalogError,
    DuplicateTagError,
    EntryNotFoundError,
    TagNotFoundError,
)

CSV_HEADERS = [
    "FilePath",
    "Title",
    "Year",
    "Rating",
    "Notes",
    "Watched",
    "Favorite",
    "FileSize",
    "Duration",
    "Tags",
]


def _parse_bool_int(value: str | None) -> bool:
    """Parse CSV boolean encoded as 1/0 or true/false (case-insensitive)."""
    return str(value or "").strip().lower() in {"1", "true", "yes"}


def _parse_int(value: str | None) -> int | None:
    s = (value or "").strip()
    return int(s) if s else None


def _parse_float(value: str | None) -> float | None:
    s = (value or "").strip()
    return float(s) if s else None


def _parse_rating(value: str | None) -> int | None:
    rating = _parse_int(value)
    if rating is not None and not 0 <= rating <= 5:
        raise ValueError(f"rating out of range: {rating}")
    return rating


class InMemoryCatalogService:
    """Catalog collaborator backed by dictionaries.

    Args:
        latency: Optional delay in seconds applied to every call, to mimic a
            slow backing service.
    """

    def __init__(self, latency: float = 0.0) -> None:
        self._latency = latency
        self._entries: dict[int, Entry] = {}
        self._tags: dict[int, Tag] = {}
        self._links: dict[int, set[int]] = {}
        self._next_entry_id = 1
        self._next_tag_id = 1

    async def _tick(self) -> None:
        if self._latency:
            await asyncio.sleep(self._latency)

    # ------------------------------------------------------------------
    # Synchronous helpers (seeding)
    # ------------------------------------------------------------------

    def add_entry(self, file_path: str, **fields: Any) -> Entry:
        if any(e.file_path == file_path for e in self._entries.values()):
            raise CatalogError(f"Entry already exists for path: {file_path}")
        entry = Entry(id=self._next_entry_id, file_path=file_path, **fields)
        self._next_entry_id += 1
        self._entries[entry.id] = entry
        self._links[entry.id] = set()
        return entry

    def ensure_tag(self, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        existing = self._find_tag(name)
        if existing is not None:
            return existing
        tag = Tag(id=self._next_tag_id, name=name.strip(), color=color)
        self._next_tag_id += 1
        self._tags[tag.id] = tag
        return tag

    def load_csv(self, csv_path: str | Path) -> int:
        """Seed entries from CSV; returns the number of rows loaded."""
        count = 0
        for file_path, fields, tag_names in self._read_csv(csv_path):
            try:
                entry = self.add_entry(file_path, **fields)
            except CatalogError as ex:
                logger.warning("CSV row skipped: {}", ex)
                continue
            for name in tag_names:
                self._links[entry.id].add(self.ensure_tag(name).id)
            count += 1
        logger.info("Seeded {} entries from {}", count, csv_path)
        return count

    @staticmethod
    def _read_csv(csv_path: str | Path) -> Iterator[tuple[str, dict[str, Any], list[str]]]:
        path = Path(csv_path)
        with path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            if not reader.fieldnames or "FilePath" not in reader.fieldnames:
                raise ValueError("CSV missing required header: FilePath")

            for row in reader:
                try:
                    file_path = (row.get("FilePath") or "").strip()
                    if not file_path:
                        raise ValueError("empty FilePath")
                    fields = {
                        "title": (row.get("Title") or "").strip() or None,
                        "year": _parse_int(row.get("Year")),
                        "rating": _parse_rating(row.get("Rating")),
                        "notes": (row.get("Notes") or "").strip() or None,
                        "watched": _parse_bool_int(row.get("Watched")),
                        "favorite": _parse_bool_int(row.get("Favorite")),
                        "file_size": _parse_int(row.get("FileSize")),
                        "duration": _parse_float(row.get("Duration")),
                    }
                    tag_names = [t.strip() for t in (row.get("Tags") or "").split(";") if t.strip()]
                    yield file_path, fields, tag_names
                except (ValueError, TypeError) as ex:
                    logger.error("CSV row error: {} | row={} ", ex, row)
                    continue

    # ------------------------------------------------------------------
    # Internal lookups
    # ------------------------------------------------------------------

    def _find_tag(self, name: str) -> Tag | None:
        lowered = name.strip().lower()
        for tag in self._tags.values():
            if tag.name.lower() == lowered:
                return tag
        return None

    def _require_entry(self, entry_id: int) -> Entry:
        try:
            return self._entries[entry_id]
        except KeyError:
            raise EntryNotFoundError(entry_id) from None

    def _require_tag(self, tag_id: int) -> Tag:
        try:
            return self._tags[tag_id]
        except KeyError:
            raise TagNotFoundError(tag_id) from None

    def _snapshot(self, entry: Entry) -> Entry:
        tags = sorted(
            (copy.copy(self._tags[t]) for t in self._links.get(entry.id, ())),
            key=lambda t: t.name.lower(),
        )
        snap = copy.copy(entry)
        snap.tags = tags
        return snap

    # ------------------------------------------------------------------
    # ICatalogService
    # ------------------------------------------------------------------

    async def list_entries(self) -> list[Entry]:
        await self._tick()
        return [self._snapshot(e) for e in self._entries.values()]

    async def list_tags(self) -> list[Tag]:
        await self._tick()
        tags = sorted(self._tags.values(), key=lambda t: t.created_at, reverse=True)
        return [copy.copy(t) for t in tags]

    async def create_entries(self, file_paths: Sequence[str]) -> list[Entry]:
        await self._tick()
        known = {e.file_path for e in self._entries.values()}
        created = []
        for p in file_paths:
            if p in known:
                continue
            known.add(p)
            created.append(self._snapshot(self.add_entry(p)))
        return created

    async def update_entry(self, entry_id: int, fields: dict[str, Any]) -> Entry:
        await self._tick()
        entry = self._require_entry(entry_id)
        changes = {k: v for k, v in fields.items() if k in ENTRY_UPDATE_FIELDS}
        rating = changes.get("rating")
        if rating is not None and not 0 <= rating <= 5:
            raise CatalogError(f"Rating must be between 0 and 5: {rating}")
        for key, value in changes.items():
            setattr(entry, key, value)
        entry.updated_at = datetime.now()
        return self._snapshot(entry)

    async def delete_entry(self, entry_id: int) -> None:
        await self._tick()
        self._require_entry(entry_id)
        del self._entries[entry_id]
        self._links.pop(entry_id, None)

    async def delete_entries(self, entry_ids: Sequence[int]) -> None:
        await self._tick()
        missing = [i for i in entry_ids if i not in self._entries]
        if missing:
            raise EntryNotFoundError(missing[0])
        for i in entry_ids:
            del self._entries[i]
            self._links.pop(i, None)

    async def create_tag(self, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        await self._tick()
        if not name.strip():
            raise CatalogError("Tag name must not be empty")
        if self._find_tag(name) is not None:
            raise DuplicateTagError(name.strip())
        return copy.copy(self.ensure_tag(name, color))

    async def update_tag(self, tag_id: int, fields: dict[str, Any]) -> Tag:
        await self._tick()
        tag = self._require_tag(tag_id)
        name = fields.get("name")
        if name is not None:
            clash = self._find_tag(name)
            if clash is not None and clash.id != tag_id:
                raise DuplicateTagError(name.strip())
            tag.name = name.strip()
        if fields.get("color") is not None:
            tag.color = fields["color"]
        return copy.copy(tag)

    async def delete_tag(self, tag_id: int) -> None:
        await self._tick()
        self._require_tag(tag_id)
        for links in self._links.values():
            links.discard(tag_id)
        del self._tags[tag_id]

    async def attach_tag(self, entry_id: int, tag_id: int) -> None:
        await self._tick()
        self._require_entry(entry_id)
        self._require_tag(tag_id)
        self._links[entry_id].add(tag_id)

    async def detach_tag(self, entry_id: int, tag_id: int) -> None:
        await self._tick()
        self._require_entry(entry_id)
        self._links[entry_id].discard(tag_id)
