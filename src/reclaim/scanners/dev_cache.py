"""Scanner for package manager and build tool caches."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Sequence

from reclaim.core.context import ScanContext
from reclaim.core.executor import clean_items
from reclaim.models.category import CATEGORIES
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult
from reclaim.models.scanner import ScannerOptions
from reclaim.scanners._common import directory_item
from reclaim.utils import xdg_cache_home

log = logging.getLogger(__name__)


def _cache_dirs() -> dict[str, Path]:
    home = Path.home()
    cache = xdg_cache_home()
    return {
        "pip": cache / "pip",
        "npm": home / ".npm" / "_cacache",
        "Yarn": cache / "yarn",
        "Cargo registry": home / ".cargo" / "registry" / "cache",
        "Gradle": home / ".gradle" / "caches",
        "Go build": cache / "go-build",
    }


class DevCacheScanner:
    """Download caches of pip, npm, Yarn, Cargo, Gradle and the Go build cache.

    Each cache directory is one item. Cleaning recreates the empty
    directory so the tools keep working.
    """

    category = CATEGORIES["dev-cache"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        found = await asyncio.gather(
            *(directory_item(path, name, self.context.aggregator) for name, path in _cache_dirs().items())
        )
        return ScanResult(category=self.category, items=[item for item in found if item is not None])

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        result = await clean_items(self.category, items, dry_run)
        if not dry_run:
            failed = {f.path for f in result.failures} | set(result.skipped)
            for item in items:
                if item.path not in failed:
                    try:
                        item.path.mkdir(parents=True, exist_ok=True)
                    except OSError:
                        log.debug("Cannot recreate: %s", item.path)
        return result
