"""Scanner for old files in the Downloads directory."""

from __future__ import annotations

from typing import Sequence

from reclaim.core.context import ScanContext
from reclaim.core.executor import clean_items
from reclaim.core.fs import enumerate_items
from reclaim.models.category import CATEGORIES
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult
from reclaim.models.scanner import ScannerOptions
from reclaim.utils import xdg_user_dir

DEFAULT_DAYS_OLD = 30


class DownloadsScanner:
    """Top-level entries of ~/Downloads not modified for ``days_old`` days."""

    category = CATEGORIES["downloads"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        options = options or {}
        items = await enumerate_items(
            xdg_user_dir("DOWNLOAD", "Downloads"),
            min_age_days=options.get("days_old", DEFAULT_DAYS_OLD),
            aggregator=self.context.aggregator,
        )
        return ScanResult(category=self.category, items=items)

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        return await clean_items(self.category, items, dry_run)
