"""Scanner discovery and loading."""

from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import pkgutil
from pathlib import Path
from types import ModuleType

from reclaim.core.context import ScanContext
from reclaim.core.registry import ScannerRegistry
from reclaim.models.category import Category
from reclaim.utils import xdg_data_home

log = logging.getLogger(__name__)

USER_SCANNER_DIR = xdg_data_home() / "reclaim" / "scanners"


def _is_scanner_class(obj: object) -> bool:
    return (
        inspect.isclass(obj)
        and isinstance(getattr(obj, "category", None), Category)
        and callable(getattr(obj, "scan", None))
        and callable(getattr(obj, "clean", None))
    )


def _find_scanners_in_module(module: ModuleType) -> list[type]:
    """Find scanner classes defined in a module (not merely imported)."""
    return [
        obj
        for _, obj in inspect.getmembers(module, _is_scanner_class)
        if obj.__module__ == module.__name__
    ]


def _load_builtin_scanners() -> list[type]:
    """Load scanners from the reclaim.scanners package."""
    import reclaim.scanners as scanners_pkg

    found: list[type] = []
    for _importer, modname, _ispkg in pkgutil.iter_modules(scanners_pkg.__path__):
        try:
            module = importlib.import_module(f"reclaim.scanners.{modname}")
            found.extend(_find_scanners_in_module(module))
        except Exception:
            log.exception("Failed to load built-in scanner module: %s", modname)
    return found


def _load_scanners_from_directory(directory: Path) -> list[type]:
    """Load scanners from ``*.py`` files in an external directory."""
    if not directory.is_dir():
        return []

    found: list[type] = []
    for path in sorted(directory.glob("*.py")):
        if path.name == "__init__.py":
            continue
        try:
            spec = importlib.util.spec_from_file_location(f"reclaim_ext_scanner_{path.stem}", path)
            if spec is None or spec.loader is None:
                continue
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
            found.extend(_find_scanners_in_module(module))
        except Exception:
            log.exception("Failed to load scanner from: %s", path)
    return found


def load_scanners(
    registry: ScannerRegistry,
    context: ScanContext,
    extra_dirs: list[Path] | None = None,
) -> None:
    """Discover, instantiate and register scanners.

    Built-in scanners come first, in module order, then user scanners from
    ``$XDG_DATA_HOME/reclaim/scanners`` and any *extra_dirs*. Every scanner
    class is constructed with the shared *context*.
    """
    classes = _load_builtin_scanners()
    for directory in [USER_SCANNER_DIR, *(extra_dirs or [])]:
        classes.extend(_load_scanners_from_directory(directory))

    for cls in classes:
        try:
            registry.register(cls(context))
        except Exception:
            log.exception("Failed to instantiate scanner: %s", cls.__name__)

    log.info("Loaded %d scanners", len(registry))


def build_registry(context: ScanContext) -> ScannerRegistry:
    registry = ScannerRegistry()
    load_scanners(registry, context)
    return registry
