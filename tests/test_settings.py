from __future__ import annotations

import json

import pytest

from infrastructure.settings import DEFAULTS, JsonSettings


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        JsonSettings(tmp_path / "nope.json")


def test_dotted_lookup_with_fallback(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"grid": {"gap": 8}, "extra": {"flag": True}}), encoding="utf-8")
    s = JsonSettings(path)
    assert s.get("grid.gap") == 8
    # Not in the file, so the built-in default applies
    assert s.get("grid.min_cell_width") == 180
    assert s.get("extra.flag") is True
    assert s.get("no.such.key", "x") == "x"


def test_defaults_are_independent_copy():
    s = JsonSettings.defaults()
    assert s.get("search.debounce_ms") == 200
    assert s.get("sorting.default") == {"column": "created_at", "ascending": False}
    s.get("grid")["gap"] = 999
    assert DEFAULTS["grid"]["gap"] == 20
