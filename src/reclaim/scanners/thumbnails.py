"""Scanner for the freedesktop thumbnail cache."""

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


class ThumbnailsScanner:
    """Cached thumbnail images; file managers regenerate them on demand."""

    category = CATEGORIES["thumbnails"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        items = await directory_entries(
            xdg_cache_home() / "thumbnails", self.context.aggregator, label="Thumbnails"
        )
        return ScanResult(category=self.category, items=items)

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        return await clean_items(self.category, items, dry_run)
