"""Multi-item selection with click, ctrl-click and shift-click semantics.

The service is decoupled from any UI toolkit. It works on the list of entry
ids currently displayed (filtered and sorted) and keeps the selection valid
against that list through `reconcile`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from loguru import logger


@dataclass
class SelectionState:
    """Selected ids in click order, a lookup set, and the range anchor.

    Attributes:
        ids: Selected entry ids, in the order they were selected.
        anchor: Index within the displayed list of the last non-range click.
        anchor_id: Entry id that sat at `anchor` when it was set.
    """

    ids: list[int] = field(default_factory=list)
    lookup: set[int] = field(default_factory=set)
    anchor: int | None = None
    anchor_id: int | None = None

    @property
    def mode(self) -> str:
        """One of "empty", "single" or "multiple"."""
        if not self.ids:
            return "empty"
        return "single" if len(self.ids) == 1 else "multiple"

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self.lookup

    def __len__(self) -> int:
        return len(self.ids)

    def replace(self, ids: Iterable[int]) -> None:
        ordered: list[int] = []
        seen: set[int] = set()
        for i in ids:
            if i not in seen:
                seen.add(i)
                ordered.append(i)
        self.ids = ordered
        self.lookup = seen


class SelectionService:
    """Apply click gestures and filter reconciliation to a `SelectionState`."""

    def __init__(self, state: SelectionState | None = None) -> None:
        self.state = state or SelectionState()

    @property
    def selected_ids(self) -> list[int]:
        return list(self.state.ids)

    def is_selected(self, entry_id: int) -> bool:
        return entry_id in self.state.lookup

    def click(
        self,
        entry_id: int,
        index: int,
        displayed_ids: Sequence[int],
        shift: bool = False,
        ctrl: bool = False,
    ) -> None:
        """Handle a click on `entry_id` shown at `index` of `displayed_ids`.

        Args:
            entry_id: Clicked entry.
            index: Position of the clicked entry in the displayed list.
            displayed_ids: Ids in display order (after filter and sort).
            shift: Range-select from the anchor; plain click when no anchor.
            ctrl: Toggle membership (Ctrl on Windows/Linux, Cmd on macOS).
        """
        if not 0 <= index < len(displayed_ids):
            raise IndexError(f"Click index {index} outside displayed list of {len(displayed_ids)}")
        if displayed_ids[index] != entry_id:
            raise ValueError(f"Entry {entry_id} is not displayed at index {index}")

        st = self.state
        if shift and st.anchor is not None:
            anchor = min(st.anchor, len(displayed_ids) - 1)
            lo, hi = min(anchor, index), max(anchor, index)
            st.replace(displayed_ids[lo : hi + 1])
            return

        if ctrl:
            if entry_id in st.lookup:
                st.replace(i for i in st.ids if i != entry_id)
            else:
                st.replace([*st.ids, entry_id])
        else:
            st.replace([entry_id])
        st.anchor = index
        st.anchor_id = entry_id

    def select_all(self, displayed_ids: Sequence[int]) -> None:
        """Select every displayed entry; anchor moves to the first one."""
        st = self.state
        st.replace(displayed_ids)
        if displayed_ids:
            st.anchor, st.anchor_id = 0, displayed_ids[0]
        else:
            st.anchor, st.anchor_id = None, None

    def clear(self) -> None:
        self.state.replace([])
        self.state.anchor = None
        self.state.anchor_id = None

    def reconcile(
        self,
        displayed_ids: Sequence[int] | None,
        existing_ids: Iterable[int] | None = None,
    ) -> None:
        """Drop selected ids that are no longer displayed or no longer exist.

        The anchor follows its entry to its new index when the entry is still
        displayed. Otherwise it is cleared when nothing stays selected, or
        clamped into the new list.

        Raises:
            ValueError: If `displayed_ids` is None.
        """
        if displayed_ids is None:
            raise ValueError("Cannot reconcile selection against a missing displayed list")

        st = self.state
        valid = set(displayed_ids)
        if existing_ids is not None:
            valid &= set(existing_ids)

        before = len(st.ids)
        st.replace(i for i in st.ids if i in valid)
        if len(st.ids) != before:
            logger.debug("Selection reconciled: {} -> {} items", before, len(st.ids))

        if not st.ids:
            st.anchor = None
            st.anchor_id = None
            return

        if st.anchor_id is not None and st.anchor_id in valid:
            st.anchor = list(displayed_ids).index(st.anchor_id)
        elif st.anchor is not None:
            st.anchor = min(st.anchor, len(displayed_ids) - 1)
            st.anchor_id = displayed_ids[st.anchor]
