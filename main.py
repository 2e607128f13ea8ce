from __future__ import annotations

import asyncio
from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication
from loguru import logger

from app.viewmodels.main_vm import MainVM
from app.views.main_window import MainWindow
from core.services.sort_service import SortSpec
from infrastructure.catalog_service import InMemoryCatalogService
from infrastructure.logging import init_logging
from infrastructure.settings import JsonSettings

BASE_DIR = Path(__file__).parent


def _parse_default_sort(settings: JsonSettings) -> SortSpec:
    # Expect a dict like: {"column": "created_at", "ascending": false}
    raw = settings.get("sorting.default", {})
    if isinstance(raw, dict) and "column" in raw:
        try:
            return SortSpec(str(raw["column"]), bool(raw.get("ascending", False)))
        except ValueError as ex:
            logger.warning("Ignoring invalid default sort: {}", ex)
    return SortSpec()


def _load_settings() -> JsonSettings:
    try:
        return JsonSettings(BASE_DIR / "settings.json")
    except FileNotFoundError as ex:
        logger.warning("{}; using defaults", ex)
        return JsonSettings.defaults()


def main() -> int:
    init_logging()
    settings = _load_settings()

    app = QApplication(sys.argv)

    service = InMemoryCatalogService()
    seed = settings.get("catalog.seed_csv")
    if seed:
        seed_path = Path(seed) if Path(seed).is_absolute() else BASE_DIR / seed
        if seed_path.exists():
            service.load_csv(seed_path)
        else:
            logger.warning("Seed CSV not found: {}", seed_path)

    vm = MainVM(service, default_sort=_parse_default_sort(settings))
    asyncio.run(vm.reload())

    win = MainWindow(vm=vm, settings=settings)
    win.refresh()
    win.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
