"""Flat list rendering of the displayed entries.

The store owns the selection, so Qt's own selection is disabled and selected
rows are painted through the background role.
"""

from __future__ import annotations

from collections.abc import Iterable

from PySide6.QtCore import QModelIndex, Qt, Signal
from PySide6.QtGui import QBrush, QColor, QStandardItem, QStandardItemModel
from PySide6.QtWidgets import QAbstractItemView, QApplication, QTreeView, QWidget

from app.viewmodels.entry_vm import EntryVM
from app.views.constants import CARD_SELECTED_BORDER, COL_TITLE, ENTRY_ID_ROLE, LIST_HEADERS
from core.models import Entry


def build_list_model(entries: Iterable[Entry], selected_ids: Iterable[int]) -> QStandardItemModel:
    """One row per entry, in display order."""
    model = QStandardItemModel()
    model.setHorizontalHeaderLabels(LIST_HEADERS)
    selected = set(selected_ids)
    highlight = QBrush(QColor(CARD_SELECTED_BORDER))
    for entry in entries:
        row = [QStandardItem(text) for text in EntryVM(entry).list_row()]
        row[COL_TITLE].setData(entry.id, ENTRY_ID_ROLE)
        for item in row:
            item.setEditable(False)
            if entry.id in selected:
                item.setData(highlight, Qt.BackgroundRole)
        model.appendRow(row)
    return model


class EntryListView(QTreeView):
    """List counterpart of `GalleryView`, bound to a `LibraryStore`."""

    entryClicked = Signal(int, int, bool, bool)  # entry_id, index, shift, ctrl

    def __init__(self, store, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._store = store
        self.setRootIsDecorated(False)
        self.setUniformRowHeights(True)
        self.setSelectionMode(QAbstractItemView.NoSelection)
        self.setEditTriggers(QAbstractItemView.NoEditTriggers)
        self.pressed.connect(self._on_pressed)

    def refresh(self) -> None:
        """Rebuild rows from the store's displayed list, keeping scroll position."""
        scroll = self.verticalScrollBar().value()
        old = self.model()
        self.setModel(
            build_list_model(self._store.displayed, self._store.selection.selected_ids)
        )
        if old is not None:
            old.deleteLater()
        self.verticalScrollBar().setValue(scroll)

    def _on_pressed(self, index: QModelIndex) -> None:
        if not index.isValid():
            return
        row = index.row()
        entry_id = self.model().index(row, COL_TITLE).data(ENTRY_ID_ROLE)
        if entry_id is None:
            return
        mods = QApplication.keyboardModifiers()
        shift = bool(mods & Qt.ShiftModifier)
        ctrl = bool(mods & (Qt.ControlModifier | Qt.MetaModifier))
        self.entryClicked.emit(int(entry_id), row, shift, ctrl)
