"""Main window: search field, category and sort pickers, gallery, status bar."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from PySide6.QtCore import QTimer
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)
from loguru import logger

from app.viewmodels.main_vm import MainVM
from app.views.constants import (
    CATEGORY_ITEMS,
    SEARCH_DEBOUNCE_MS,
    SORT_ITEMS,
    VIEW_MODE_ITEMS,
)
from app.views.gallery_view import GalleryView
from app.views.list_view import EntryListView
from core.models import tag_category
from core.services.interfaces import CatalogError


class MainWindow(QMainWindow):
    """Library window bound to a `MainVM`."""

    def __init__(self, vm: MainVM, settings: Any | None = None) -> None:
        super().__init__()
        self._vm = vm
        self._store = vm.store
        self._settings = settings
        debounce = SEARCH_DEBOUNCE_MS
        if settings is not None:
            debounce = int(settings.get("search.debounce_ms", SEARCH_DEBOUNCE_MS))

        self._search = QLineEdit()
        self._search.setPlaceholderText("Search titles, notes, paths or tags")
        self._search.setClearButtonEnabled(True)
        self._category = QComboBox()
        self._sort = QComboBox()
        for label, column in SORT_ITEMS:
            self._sort.addItem(label, column)
        self._view = QComboBox()
        for label, mode in VIEW_MODE_ITEMS:
            self._view.addItem(label, mode)
        self.gallery = GalleryView(self._store, settings)
        self.list_view = EntryListView(self._store)
        self._stack = QStackedWidget()
        self._stack.addWidget(self.gallery)
        self._stack.addWidget(self.list_view)

        # Single-shot timer restarted on every keystroke; only the settled
        # query reaches the store.
        self._debounce = QTimer(self)
        self._debounce.setSingleShot(True)
        self._debounce.setInterval(debounce)

        top = QHBoxLayout()
        top.addWidget(self._search, 1)
        top.addWidget(self._category)
        top.addWidget(self._sort)
        top.addWidget(self._view)
        root = QVBoxLayout()
        root.addLayout(top)
        root.addWidget(self._stack, 1)
        central = QWidget()
        central.setLayout(root)
        self.setCentralWidget(central)

        self._build_actions()
        self._connect_signals()
        self._rebuild_categories()
        self._sync_sort_combo()
        self._view.setCurrentIndex(max(0, self._view.findData(self._store.view_mode)))
        self.setWindowTitle("LibCat")
        self.resize(1280, 800)

    def _build_actions(self) -> None:
        find = QAction("Find", self)
        find.setShortcut(QKeySequence.Find)
        find.triggered.connect(self._search.setFocus)
        select_all = QAction("Select All", self)
        select_all.setShortcut(QKeySequence.SelectAll)
        select_all.triggered.connect(self._select_all)
        delete = QAction("Remove From Library", self)
        delete.setShortcut(QKeySequence.Delete)
        delete.triggered.connect(self._delete_selected)
        for act in (find, select_all, delete):
            self.addAction(act)

    def _connect_signals(self) -> None:
        self._search.textChanged.connect(lambda _t: self._debounce.start())
        self._debounce.timeout.connect(self._apply_query)
        self._category.currentIndexChanged.connect(self._on_category)
        self._sort.activated.connect(self._on_sort)
        self._view.currentIndexChanged.connect(self._on_view_mode)
        self.gallery.entryClicked.connect(self._on_entry_clicked)
        self.list_view.entryClicked.connect(self._on_entry_clicked)
        self._vm.subscribe(self.refresh)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        self._rebuild_categories()
        self._refresh_view()
        self._show_status()

    def _refresh_view(self) -> None:
        if self._store.view_mode == "list":
            self._stack.setCurrentWidget(self.list_view)
            self.list_view.refresh()
        else:
            self._stack.setCurrentWidget(self.gallery)
            self.gallery.refresh()

    def _rebuild_categories(self) -> None:
        current = self._store.filter_spec.category
        self._category.blockSignals(True)
        self._category.clear()
        for label, selector in CATEGORY_ITEMS:
            self._category.addItem(label, selector)
        for tag in self._store.tags:
            self._category.addItem(f"# {tag.name}", tag_category(tag.id))
        pos = self._category.findData(current)
        self._category.setCurrentIndex(max(0, pos))
        self._category.blockSignals(False)

    def _sync_sort_combo(self) -> None:
        pos = self._sort.findData(self._store.sort_spec.column)
        self._sort.setCurrentIndex(max(0, pos))

    def _show_status(self) -> None:
        n = len(self._store.displayed_ids)
        noun = "movie" if n == 1 else "movies"
        selected = len(self._store.selection.selected_ids)
        sel = f" | {selected} selected" if selected else ""
        self.statusBar().showMessage(f"{self._store.filter_title()}: {n} {noun}{sel}")

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def _apply_query(self) -> None:
        self._store.set_query(self._search.text())
        self._refresh_view()
        self._show_status()

    def _on_category(self, index: int) -> None:
        selector = self._category.itemData(index)
        if selector is None:
            return
        self._store.set_category(selector)
        self._refresh_view()
        self._show_status()

    def _on_sort(self, index: int) -> None:
        self._store.toggle_sort(self._sort.itemData(index))
        self._refresh_view()

    def _on_view_mode(self, index: int) -> None:
        mode = self._view.itemData(index)
        if mode is None:
            return
        self._store.set_view_mode(mode)
        self._refresh_view()

    def _on_entry_clicked(self, entry_id: int, index: int, shift: bool, ctrl: bool) -> None:
        self._store.click(entry_id, index, shift=shift, ctrl=ctrl)
        self._refresh_view()
        self._show_status()

    def _select_all(self) -> None:
        self._store.select_all()
        self._refresh_view()
        self._show_status()

    def _delete_selected(self) -> None:
        count = len(self._store.selection.selected_ids)
        if not count:
            return
        answer = QMessageBox.question(
            self,
            "Remove From Library",
            f"Remove {count} item(s) from the library? Files on disk are kept.",
        )
        if answer != QMessageBox.Yes:
            return
        result = self._run(self._vm.delete_selected())
        if result is not None and result.failed:
            QMessageBox.warning(
                self,
                "Remove From Library",
                f"{len(result.failed)} item(s) could not be removed. See the log for details.",
            )

    def _run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        try:
            return asyncio.run(coro)
        except CatalogError as ex:
            logger.error("Catalog operation failed: {}", ex)
            QMessageBox.warning(self, "LibCat", str(ex))
            return None
