"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

DEFAULTS: dict[str, Any] = {
    "grid": {
        "min_cell_width": 180,
        "gap": 20,
        "padding": 24,
        "row_height": 300,
        "overscan_rows": 2,
        "virtualization_threshold": 1000,
    },
    "visibility": {"margin_px": 500},
    "search": {"debounce_ms": 200},
    "sorting": {"default": {"column": "created_at", "ascending": False}},
    "catalog": {"seed_csv": None},
}


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    @classmethod
    def defaults(cls) -> JsonSettings:
        """Settings object holding only built-in defaults."""
        inst = cls.__new__(cls)
        inst._path = None
        inst._data = json.loads(json.dumps(DEFAULTS))
        return inst

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present.

        Keys missing from the file fall back to the built-in defaults before
        `default` is used.
        """
        for source in (self._data, DEFAULTS):
            node = _lookup(source, key)
            if node is not _MISSING:
                return node
        return default


_MISSING = object()


def _lookup(data: Any, key: str) -> Any:
    node = data
    for part in key.split("."):
        if isinstance(node, dict) and part in node:
            node = node[part]
        else:
            return _MISSING
    return node
