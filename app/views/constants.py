"""
UI/view constants centralized for reuse across view modules.
"""

from __future__ import annotations

from PySide6.QtCore import Qt

from core.models import (
    CATEGORY_ALL,
    CATEGORY_FAVORITES,
    CATEGORY_UNTAGGED,
    CATEGORY_UNWATCHED,
    CATEGORY_WATCHED,
)

# Category combo box (label, selector); tag categories are appended at runtime
CATEGORY_ITEMS: list[tuple[str, str]] = [
    ("All", CATEGORY_ALL),
    ("Untagged", CATEGORY_UNTAGGED),
    ("Watched", CATEGORY_WATCHED),
    ("Unwatched", CATEGORY_UNWATCHED),
    ("Favorites", CATEGORY_FAVORITES),
]

SORT_ITEMS: list[tuple[str, str]] = [
    ("Title", "title"),
    ("Added", "created_at"),
    ("Size", "file_size"),
    ("Duration", "duration"),
]

# Overridable by settings.json
SEARCH_DEBOUNCE_MS: int = 200

CARD_BG = "#1f1d24"
CARD_SELECTED_BORDER = "#d9956e"

# List view columns; order matches EntryVM.list_row()
LIST_HEADERS: list[str] = ["Title", "Year", "Size", "Duration", "Tags"]
COL_TITLE = 0

# Role on the title cell carrying the entry id
ENTRY_ID_ROLE: int = Qt.UserRole

VIEW_MODE_ITEMS: list[tuple[str, str]] = [
    ("Grid", "grid"),
    ("List", "list"),
]
