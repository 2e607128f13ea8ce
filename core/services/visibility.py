"""Shared viewport visibility tracking for lazy image loading.

One tracker serves every cell of a view. Cells register with `observe`; the
host reports intersections (or asks the tracker to `scan` element bounds
against the viewport plus a lookahead margin). Ids that have been seen once
stay in the visible set for the tracker's lifetime so images are not
unloaded and reloaded while scrolling back and forth.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Iterable

from loguru import logger

LOOKAHEAD_MARGIN_PX = 500

Bounds = tuple[float, float]  # (top, bottom) in scroll-content coordinates


class VisibilityTracker:
    """Track which ids have ever come within `margin` of the viewport."""

    def __init__(self, margin: float = LOOKAHEAD_MARGIN_PX) -> None:
        self.margin = margin
        self._elements: dict[Hashable, Hashable] = {}
        self._visible: set[Hashable] = set()
        self._listeners: list[Callable[[set[Hashable]], None]] = []

    def observe(self, element: Hashable | None, entry_id: Hashable) -> None:
        """Register `element` as the rendered cell for `entry_id`.

        Re-registering an element rebinds it to the new id (recycled cells).
        """
        if element is None:
            return
        self._elements[element] = entry_id

    def unobserve(self, element: Hashable) -> None:
        """Stop tracking `element`; the visible set is left untouched."""
        self._elements.pop(element, None)

    def prune(self, is_connected: Callable[[Hashable], bool]) -> int:
        """Drop elements that are no longer part of the view."""
        stale = [el for el in self._elements if not is_connected(el)]
        for el in stale:
            del self._elements[el]
        if stale:
            logger.debug("Pruned {} disconnected elements", len(stale))
        return len(stale)

    def on_change(self, callback: Callable[[set[Hashable]], None]) -> None:
        """Call `callback(newly_visible_ids)` whenever the visible set grows."""
        self._listeners.append(callback)

    def handle_intersections(self, records: Iterable[tuple[Hashable, bool]]) -> set[Hashable]:
        """Apply `(element, is_intersecting)` records from the host observer.

        Returns the ids that became visible for the first time.
        """
        added: set[Hashable] = set()
        for element, intersecting in records:
            if not intersecting:
                continue
            entry_id = self._elements.get(element)
            if entry_id is None or entry_id in self._visible:
                continue
            self._visible.add(entry_id)
            added.add(entry_id)
        if added:
            for cb in list(self._listeners):
                cb(added)
        return added

    def scan(
        self,
        viewport_top: float,
        viewport_height: float,
        bounds: Callable[[Hashable], Bounds | None],
    ) -> set[Hashable]:
        """Compute intersections of all observed elements with the viewport.

        Args:
            viewport_top: Scroll offset of the viewport's top edge.
            viewport_height: Height of the viewport.
            bounds: Returns an element's (top, bottom), or None if unlaid.
        """
        top = viewport_top - self.margin
        bottom = viewport_top + viewport_height + self.margin
        records: list[tuple[Hashable, bool]] = []
        for element in list(self._elements):
            b = bounds(element)
            if b is None:
                continue
            el_top, el_bottom = b
            records.append((element, el_bottom >= top and el_top <= bottom))
        return self.handle_intersections(records)

    def is_visible(self, entry_id: Hashable) -> bool:
        return entry_id in self._visible

    @property
    def visible_ids(self) -> frozenset[Hashable]:
        return frozenset(self._visible)

    @property
    def observed_count(self) -> int:
        return len(self._elements)

    def reset(self) -> None:
        """Start a new session, as when the view is remounted."""
        self._elements.clear()
        self._visible.clear()
