"""ViewModel orchestrating catalog IO and the in-memory library store."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any

from loguru import logger

from core.models import DEFAULT_TAG_COLOR, Entry, Tag
from core.services.interfaces import BulkResult, CatalogError, ICatalogService
from core.services.library_store import LibraryStore
from core.services.sort_service import SortSpec


class MainVM:
    """Main application view-model.

    Mediates between an asynchronous catalog service and the `LibraryStore`.
    Every write awaits the service first and only then updates the store, so
    a failed call leaves the in-memory state exactly as it was. Failures are
    logged and re-raised unchanged; nothing is retried.
    """

    def __init__(
        self,
        service: ICatalogService,
        store: LibraryStore | None = None,
        default_sort: SortSpec | None = None,
    ) -> None:
        """Create a MainVM.

        Args:
            service: Catalog collaborator implementing `ICatalogService`.
            store: Library store (defaults to a fresh `LibraryStore`).
            default_sort: Sort applied to the displayed list.
        """
        self._service = service
        self.store = store or LibraryStore(default_sort=default_sort)
        self._reload_version = 0
        self._listeners: list[Callable[[], None]] = []

    def subscribe(self, callback: Callable[[], None]) -> None:
        """Call `callback()` after every applied change."""
        self._listeners.append(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            cb()

    async def _call(self, what: str, op: Awaitable[Any]) -> Any:
        try:
            return await op
        except CatalogError as ex:
            logger.error("{} failed: {}", what, ex)
            raise

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def reload(self) -> bool:
        """Reload entries and tags; returns False if a newer reload won."""
        self._reload_version += 1
        version = self._reload_version
        entries = await self._call("Load entries", self._service.list_entries())
        tags = await self._call("Load tags", self._service.list_tags())
        if version != self._reload_version:
            logger.debug("Discarding stale reload {} (current {})", version, self._reload_version)
            return False
        self.store.set_tags(tags)
        self.store.set_entries(entries)
        logger.info("Library loaded: {} entries, {} tags", len(entries), len(tags))
        self._notify()
        return True

    async def add_files(self, file_paths: Sequence[str]) -> list[Entry]:
        created = await self._call("Add files", self._service.create_entries(file_paths))
        self.store.add_entries(created)
        logger.info("Added {} of {} files", len(created), len(file_paths))
        self._notify()
        return created

    # ------------------------------------------------------------------
    # Entry edits
    # ------------------------------------------------------------------

    async def update_entry(self, entry_id: int, **fields: Any) -> Entry:
        updated = await self._call(
            f"Update entry {entry_id}", self._service.update_entry(entry_id, fields)
        )
        current = self.store.get_entry(entry_id)
        if current is not None:
            # Keep the store's tag snapshot; the service may not return one.
            updated.tags = current.tags
            self.store.replace_entry(updated)
        self._notify()
        return updated

    async def toggle_watched(self, entry_id: int) -> Entry:
        entry = self._require(entry_id)
        return await self.update_entry(entry_id, watched=not entry.watched)

    async def toggle_favorite(self, entry_id: int) -> Entry:
        entry = self._require(entry_id)
        return await self.update_entry(entry_id, favorite=not entry.favorite)

    async def set_rating(self, entry_id: int, rating: int | None) -> Entry:
        return await self.update_entry(entry_id, rating=rating)

    async def delete_entry(self, entry_id: int) -> None:
        await self._call(f"Delete entry {entry_id}", self._service.delete_entry(entry_id))
        self.store.remove_entry(entry_id)
        self._notify()

    async def delete_entries(self, entry_ids: Iterable[int]) -> BulkResult:
        """Remove entries one by one; the store drops only confirmed ids."""
        return await self._bulk(
            "Delete",
            list(entry_ids),
            self._service.delete_entry,
            on_success=self.store.remove_entries,
        )

    async def delete_selected(self) -> BulkResult:
        return await self.delete_entries(self.store.selection.selected_ids)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    async def create_tag(self, name: str, color: str = DEFAULT_TAG_COLOR) -> Tag:
        tag = await self._call(f"Create tag '{name}'", self._service.create_tag(name, color))
        self.store.add_tag(tag)
        self._notify()
        return tag

    async def update_tag(self, tag_id: int, **fields: Any) -> Tag:
        tag = await self._call(f"Update tag {tag_id}", self._service.update_tag(tag_id, fields))
        self.store.update_tag(tag_id, name=tag.name, color=tag.color)
        self._notify()
        return tag

    async def rename_tag(self, tag_id: int, name: str) -> Tag:
        return await self.update_tag(tag_id, name=name)

    async def delete_tag(self, tag_id: int) -> None:
        await self._call(f"Delete tag {tag_id}", self._service.delete_tag(tag_id))
        self.store.remove_tag(tag_id)
        self._notify()

    async def attach_tag(self, entry_id: int, tag_id: int) -> None:
        await self._call(
            f"Attach tag {tag_id} to entry {entry_id}", self._service.attach_tag(entry_id, tag_id)
        )
        self.store.attach_tag(entry_id, tag_id)
        self._notify()

    async def detach_tag(self, entry_id: int, tag_id: int) -> None:
        await self._call(
            f"Detach tag {tag_id} from entry {entry_id}",
            self._service.detach_tag(entry_id, tag_id),
        )
        self.store.detach_tag(entry_id, tag_id)
        self._notify()

    async def create_and_attach_tag(
        self, name: str, entry_ids: Iterable[int], color: str = DEFAULT_TAG_COLOR
    ) -> tuple[Tag, BulkResult]:
        """Reuse a tag with this name (any case) or create it, then attach."""
        tag = self.store.find_tag_by_name(name)
        if tag is None:
            tag = await self.create_tag(name.strip(), color)
        result = await self.bulk_attach_tag(tag.id, entry_ids)
        return tag, result

    # ------------------------------------------------------------------
    # Bulk edits over the selection
    # ------------------------------------------------------------------

    async def bulk_attach_tag(self, tag_id: int, entry_ids: Iterable[int] | None = None) -> BulkResult:
        ids = self._ids_or_selection(entry_ids)

        async def attach(entry_id: int) -> None:
            await self._service.attach_tag(entry_id, tag_id)

        def apply(done: list[int]) -> None:
            for i in done:
                self.store.attach_tag(i, tag_id)

        return await self._bulk(f"Attach tag {tag_id}", ids, attach, on_success=apply)

    async def bulk_detach_tag(self, tag_id: int, entry_ids: Iterable[int] | None = None) -> BulkResult:
        ids = self._ids_or_selection(entry_ids)

        async def detach(entry_id: int) -> None:
            await self._service.detach_tag(entry_id, tag_id)

        def apply(done: list[int]) -> None:
            for i in done:
                self.store.detach_tag(i, tag_id)

        return await self._bulk(f"Detach tag {tag_id}", ids, detach, on_success=apply)

    async def bulk_set_watched(self, watched: bool, entry_ids: Iterable[int] | None = None) -> BulkResult:
        return await self._bulk_update(self._ids_or_selection(entry_ids), watched=watched)

    async def bulk_set_favorite(
        self, favorite: bool, entry_ids: Iterable[int] | None = None
    ) -> BulkResult:
        return await self._bulk_update(self._ids_or_selection(entry_ids), favorite=favorite)

    async def _bulk_update(self, ids: list[int], **fields: Any) -> BulkResult:
        async def update(entry_id: int) -> None:
            await self._service.update_entry(entry_id, fields)

        def apply(done: list[int]) -> None:
            for i in done:
                self.store.update_entry(i, **fields)

        return await self._bulk(f"Update {sorted(fields)}", ids, update, on_success=apply)

    async def _bulk(
        self,
        what: str,
        ids: list[int],
        op: Callable[[int], Awaitable[Any]],
        on_success: Callable[[list[int]], None],
    ) -> BulkResult:
        result = BulkResult()
        for entry_id in ids:
            try:
                await op(entry_id)
                result.succeeded.append(entry_id)
            except CatalogError as ex:
                logger.error("{} failed for entry {}: {}", what, entry_id, ex)
                result.failed.append((entry_id, str(ex)))
        # Another confirmed call may have removed an entry while we awaited.
        present = [i for i in result.succeeded if self.store.get_entry(i) is not None]
        if len(present) != len(result.succeeded):
            logger.debug(
                "{}: skipping {} entries no longer loaded",
                what,
                len(result.succeeded) - len(present),
            )
        try:
            if present:
                on_success(present)
        finally:
            logger.info(
                "{}: {} succeeded, {} failed", what, len(result.succeeded), len(result.failed)
            )
            self._notify()
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ids_or_selection(self, entry_ids: Iterable[int] | None) -> list[int]:
        if entry_ids is None:
            return self.store.selection.selected_ids
        return list(entry_ids)

    def _require(self, entry_id: int) -> Entry:
        entry = self.store.get_entry(entry_id)
        if entry is None:
            raise KeyError(f"Entry {entry_id} is not loaded")
        return entry

    @property
    def entry_count(self) -> int:
        """Number of entries currently loaded."""
        return len(self.store.entries)
