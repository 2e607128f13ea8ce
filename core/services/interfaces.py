"""Core service interfaces and shared data structures.

This module defines the typed failures raised by catalog collaborators, the
per-item result of bulk operations, and the asynchronous catalog service
protocol consumed by the view-model layer.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from core.models import Entry, Tag


class CatalogError(Exception):
    """Failure reported by an external catalog collaborator."""


class EntryNotFoundError(CatalogError):
    def __init__(self, entry_id: int) -> None:
        super().__init__(f"Entry not found: {entry_id}")
        self.entry_id = entry_id


class TagNotFoundError(CatalogError):
    def __init__(self, tag_id: int) -> None:
        super().__init__(f"Tag not found: {tag_id}")
        self.tag_id = tag_id


class DuplicateTagError(CatalogError):
    def __init__(self, name: str) -> None:
        super().__init__(f"A tag named '{name}' already exists")
        self.name = name


@dataclass
class BulkResult:
    """Outcome of a per-item bulk operation.

    Attributes:
        succeeded: Entry ids the collaborator confirmed.
        failed: Tuples of (entry_id, reason) for failures.
    """

    succeeded: list[int] = field(default_factory=list)
    failed: list[tuple[int, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


class ICatalogService(Protocol):
    """Asynchronous catalog operations provided by the platform layer."""

    async def list_entries(self) -> list[Entry]:
        """Return every entry with its tag snapshot."""
        ...

    async def list_tags(self) -> list[Tag]:
        ...

    async def create_entries(self, file_paths: Sequence[str]) -> list[Entry]:
        """Add entries for new file paths; known paths are skipped."""
        ...

    async def update_entry(self, entry_id: int, fields: dict[str, Any]) -> Entry:
        ...

    async def delete_entry(self, entry_id: int) -> None:
        ...

    async def delete_entries(self, entry_ids: Sequence[int]) -> None:
        ...

    async def create_tag(self, name: str, color: str) -> Tag:
        ...

    async def update_tag(self, tag_id: int, fields: dict[str, Any]) -> Tag:
        ...

    async def delete_tag(self, tag_id: int) -> None:
        ...

    async def attach_tag(self, entry_id: int, tag_id: int) -> None:
        ...

    async def detach_tag(self, entry_id: int, tag_id: int) -> None:
        ...
