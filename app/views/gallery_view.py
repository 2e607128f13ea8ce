"""Grid gallery over a QScrollArea with optional row virtualization.

Cards are positioned absolutely from `GridLayout.cell_rect`. Above the
virtualization threshold only the rows near the viewport are materialized
and cards are recycled; below it every card exists. Poster images load only
once the shared `VisibilityTracker` has seen the entry.
"""

from __future__ import annotations

from typing import Any

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QMouseEvent, QPixmap
from PySide6.QtWidgets import QFrame, QLabel, QScrollArea, QVBoxLayout, QWidget
from loguru import logger

from app.viewmodels.entry_vm import EntryVM
from app.views.constants import CARD_BG, CARD_SELECTED_BORDER
from core.models import Entry
from core.services.grid_layout import GridLayout, compute_layout, should_virtualize
from core.services.visibility import VisibilityTracker


class EntryCard(QFrame):
    """One gallery cell showing poster, title and tag dots."""

    clicked = Signal(int, int, bool, bool)  # entry_id, index, shift, ctrl

    def __init__(self, parent: QWidget) -> None:
        super().__init__(parent)
        self.entry_id: int | None = None
        self.index = -1
        self._poster_loaded_for: int | None = None
        self._poster = QLabel(self)
        self._poster.setAlignment(Qt.AlignCenter)
        self._title = QLabel(self)
        self._title.setWordWrap(True)
        lay = QVBoxLayout(self)
        lay.setContentsMargins(4, 4, 4, 4)
        lay.addWidget(self._poster, 1)
        lay.addWidget(self._title)

    def bind(self, vm: EntryVM, index: int, selected: bool) -> None:
        if self.entry_id != vm.entry.id:
            self._poster.clear()
            self._poster_loaded_for = None
        self.entry_id = vm.entry.id
        self.index = index
        extra = f"  +{vm.extra_tag_count}" if vm.extra_tag_count else ""
        dots = " ".join(f'<span style="color:{c}">●</span>' for c in vm.tag_colors)
        self._title.setText(f"{dots}{extra}<br>{vm.display_title}")
        border = CARD_SELECTED_BORDER if selected else "transparent"
        self.setStyleSheet(
            f"EntryCard {{ background: {CARD_BG}; border: 2px solid {border}; border-radius: 8px; }}"
        )

    def load_poster(self, vm: EntryVM) -> None:
        if self._poster_loaded_for == vm.entry.id:
            return
        self._poster_loaded_for = vm.entry.id
        path = vm.poster_path
        if not path:
            return
        pix = QPixmap(path)
        if pix.isNull():
            logger.debug("Poster not readable: {}", path)
            return
        self._poster.setPixmap(
            pix.scaled(self._poster.size(), Qt.KeepAspectRatio, Qt.SmoothTransformation)
        )

    def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
        if event.button() == Qt.LeftButton and self.entry_id is not None:
            mods = event.modifiers()
            shift = bool(mods & Qt.ShiftModifier)
            ctrl = bool(mods & (Qt.ControlModifier | Qt.MetaModifier))
            self.clicked.emit(self.entry_id, self.index, shift, ctrl)
        super().mousePressEvent(event)


class GalleryView(QScrollArea):
    """Virtualized entry grid bound to a `LibraryStore`."""

    entryClicked = Signal(int, int, bool, bool)

    def __init__(self, store: Any, settings: Any | None = None, parent: QWidget | None = None):
        super().__init__(parent)
        self._store = store
        get = settings.get if settings is not None else (lambda _k, d=None: d)
        self._min_cell = int(get("grid.min_cell_width", 180))
        self._gap = int(get("grid.gap", 20))
        self._padding = int(get("grid.padding", 24))
        self._row_height = int(get("grid.row_height", 300))
        self._overscan = int(get("grid.overscan_rows", 2))
        self._threshold = int(get("grid.virtualization_threshold", 1000))
        self._tracker = VisibilityTracker(margin=int(get("visibility.margin_px", 500)))

        self._container = QWidget()
        self.setWidget(self._container)
        self.setWidgetResizable(False)
        self._cards: dict[int, EntryCard] = {}  # index -> card
        self._pool: list[EntryCard] = []
        self._entries: list[Entry] = []
        self._layout: GridLayout = self._compute()

        self.verticalScrollBar().valueChanged.connect(lambda _v: self._sync())

    @property
    def tracker(self) -> VisibilityTracker:
        return self._tracker

    @property
    def grid_layout(self) -> GridLayout:
        return self._layout

    def _compute(self) -> GridLayout:
        return compute_layout(
            self.viewport().width(),
            len(self._entries),
            min_cell_width=self._min_cell,
            gap=self._gap,
            padding=self._padding,
            row_height=self._row_height,
        )

    def refresh(self) -> None:
        """Re-read the displayed list from the store and redraw."""
        self._entries = self._store.displayed
        self._layout = self._compute()
        self._container.resize(self.viewport().width(), int(self._layout.content_height))
        self._sync(rebind=True)

    def resizeEvent(self, event) -> None:  # noqa: N802
        super().resizeEvent(event)
        layout = self._compute()
        if layout != self._layout:
            self._layout = layout
            self._container.resize(self.viewport().width(), int(layout.content_height))
            self._sync(rebind=True)

    def _wanted_indices(self) -> range:
        # Cards are placed at absolute cell rects, so the empty trailing slots of
        # a partial last row need no widget to keep the other columns in place.
        count = len(self._entries)
        if not should_virtualize(count, self._threshold):
            return range(count)
        window = self._layout.visible_indices(
            self.verticalScrollBar().value(), self.viewport().height(), self._overscan
        )
        return range(window.start, min(window.stop, count))

    def _acquire(self) -> EntryCard:
        if self._pool:
            return self._pool.pop()
        card = EntryCard(self._container)
        card.clicked.connect(self.entryClicked)
        return card

    def _sync(self, rebind: bool = False) -> None:
        wanted = self._wanted_indices()
        for idx in [i for i in self._cards if i not in wanted]:
            card = self._cards.pop(idx)
            card.hide()
            self._tracker.unobserve(card)
            self._pool.append(card)

        selection = self._store.selection
        for idx in wanted:
            card = self._cards.get(idx)
            fresh = card is None
            if fresh:
                card = self._acquire()
                self._cards[idx] = card
            if fresh or rebind:
                entry = self._entries[idx]
                rect = self._layout.cell_rect(idx)
                card.setGeometry(int(rect.x), int(rect.y), int(rect.width), int(rect.height))
                card.bind(EntryVM(entry), idx, selection.is_selected(entry.id))
                self._tracker.observe(card, entry.id)
                card.show()

        top = self.verticalScrollBar().value()
        self._tracker.scan(top, self.viewport().height(), self._card_bounds)
        for idx, card in self._cards.items():
            entry = self._entries[idx]
            if self._tracker.is_visible(entry.id):
                card.load_poster(EntryVM(entry))

    def _card_bounds(self, card: EntryCard) -> tuple[float, float] | None:
        if card.isHidden():
            return None
        geo = card.geometry()
        return float(geo.top()), float(geo.bottom())
