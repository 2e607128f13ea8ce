"""Virtualized grid geometry (pure math).

Columns are derived from container width, a minimum cell width, a gap and
container padding:

    columns = max(1, floor((width - 2 * padding + gap) / (min_cell_width + gap)))
    column_width = (width - 2 * padding) / columns
    rows = ceil(count / columns)

Cell `(row, col)` holds linear index `row * columns + col`. Indices at or past
`count` are empty placeholders that keep the last row from collapsing.
"""

from __future__ import annotations

from dataclasses import dataclass
import math

ITEM_MIN_WIDTH = 180
ITEM_GAP = 20
ITEM_HEIGHT = 300
PADDING = 24
OVERSCAN_ROWS = 2
VIRTUALIZATION_THRESHOLD = 1000


@dataclass(frozen=True)
class CellRect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class GridLayout:
    """Derived layout for one container width and entry count."""

    container_width: float
    count: int
    columns: int
    column_width: float
    rows: int
    row_height: int = ITEM_HEIGHT
    gap: int = ITEM_GAP
    padding: int = PADDING

    @property
    def content_height(self) -> float:
        return self.rows * self.row_height + 2 * self.padding

    def position(self, index: int) -> tuple[int, int]:
        """Return (row, col) of a linear cell index."""
        if index < 0:
            raise IndexError(f"Negative cell index: {index}")
        return divmod(index, self.columns)

    def index(self, row: int, col: int) -> int:
        return row * self.columns + col

    def is_placeholder(self, index: int) -> bool:
        return index >= self.count

    def cell_rect(self, index: int) -> CellRect:
        """Absolute rectangle of the cell's card, inset by half the gap."""
        row, col = self.position(index)
        inset = self.gap / 2
        return CellRect(
            x=self.padding + col * self.column_width + inset,
            y=self.padding + row * self.row_height + inset,
            width=self.column_width - self.gap,
            height=self.row_height - self.gap,
        )

    def index_at(self, x: float, y: float) -> int | None:
        """Hit test a container point; None in padding or on placeholders."""
        cx = x - self.padding
        cy = y - self.padding
        if cx < 0 or cy < 0 or self.column_width <= 0:
            return None
        col = int(cx // self.column_width)
        row = int(cy // self.row_height)
        if col >= self.columns:
            return None
        idx = self.index(row, col)
        if idx >= self.count:
            return None
        return idx

    def visible_rows(
        self, scroll_y: float, viewport_height: float, overscan: int = OVERSCAN_ROWS
    ) -> tuple[int, int]:
        """First and last row (inclusive) to materialize, or (0, -1) if none."""
        if self.rows <= 0:
            return 0, -1
        top = scroll_y - self.padding
        bottom = scroll_y + viewport_height - self.padding
        first = max(0, math.floor(top / self.row_height) - overscan)
        last = min(self.rows - 1, math.floor(bottom / self.row_height) + overscan)
        if last < first:
            return 0, -1
        return first, last

    def visible_indices(
        self, scroll_y: float, viewport_height: float, overscan: int = OVERSCAN_ROWS
    ) -> range:
        """Cell indices (placeholders included) in the materialized rows."""
        first, last = self.visible_rows(scroll_y, viewport_height, overscan)
        if last < first:
            return range(0)
        return range(first * self.columns, (last + 1) * self.columns)


def column_count(
    container_width: float,
    min_cell_width: float = ITEM_MIN_WIDTH,
    gap: float = ITEM_GAP,
    padding: float = PADDING,
) -> int:
    """Maximum number of columns that fit, never fewer than one."""
    if min_cell_width + gap <= 0:
        raise ValueError("min_cell_width + gap must be positive")
    content_width = container_width - 2 * padding
    return max(1, math.floor((content_width + gap) / (min_cell_width + gap)))


def compute_layout(
    container_width: float,
    count: int,
    min_cell_width: int = ITEM_MIN_WIDTH,
    gap: int = ITEM_GAP,
    padding: int = PADDING,
    row_height: int = ITEM_HEIGHT,
) -> GridLayout:
    """Recompute the grid for a new container width or entry count."""
    if count < 0:
        raise ValueError(f"Negative entry count: {count}")
    columns = column_count(container_width, min_cell_width, gap, padding)
    content_width = max(0.0, container_width - 2 * padding)
    return GridLayout(
        container_width=container_width,
        count=count,
        columns=columns,
        column_width=content_width / columns,
        rows=math.ceil(count / columns),
        row_height=row_height,
        gap=gap,
        padding=padding,
    )


def should_virtualize(count: int, threshold: int = VIRTUALIZATION_THRESHOLD) -> bool:
    """True when the catalog is large enough to render only visible rows."""
    return count > threshold
