"""Scanner for ~/.cache contents."""

from __future__ import annotations

from typing import Sequence

from reclaim.core.context import ScanContext
from reclaim.core.executor import clean_items
from reclaim.models.category import CATEGORIES
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult
from reclaim.models.scanner import ScannerOptions
from reclaim.scanners._common import directory_entries
from reclaim.utils import xdg_cache_home

# Directories used by running applications that should not be cleaned
_EXCLUDE_DIRS = {
    "fontconfig",
    "icon-cache.kcache",
    "gstreamer-1.0",
    "babl",
    "gegl-0.4",
}

# Handled by dedicated scanners
_SCANNER_DIRS = {
    "thumbnails",
    "pip",
    "yarn",
    "go-build",
}


class UserCacheScanner:
    """Cleans ~/.cache, excluding font and shader caches and dirs owned by other scanners."""

    category = CATEGORIES["user-cache"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        items = await directory_entries(
            xdg_cache_home(),
            self.context.aggregator,
            label="Cache",
            exclude=_EXCLUDE_DIRS | _SCANNER_DIRS,
        )
        return ScanResult(category=self.category, items=items)

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        return await clean_items(self.category, items, dry_run)
