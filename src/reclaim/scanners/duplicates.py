"""Scanner for duplicate files in the user's directories."""

from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Sequence

from reclaim.core.context import ScanContext
from reclaim.core.duplicates import DEFAULT_MAX_FILES, DEFAULT_MIN_SIZE, DuplicateDetector
from reclaim.core.executor import clean_items
from reclaim.core.fs import DEFAULT_MAX_DEPTH
from reclaim.models.category import CATEGORIES
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult
from reclaim.models.scanner import ScannerOptions
from reclaim.scanners._common import unique_existing
from reclaim.utils import xdg_user_dir


def default_search_paths() -> list[Path]:
    return [
        xdg_user_dir("DOWNLOAD", "Downloads"),
        xdg_user_dir("DOCUMENTS", "Documents"),
        xdg_user_dir("DESKTOP", "Desktop"),
    ]


class DuplicatesScanner:
    """Older copies of files whose content also exists in a newer file.

    The newest copy of each group is never offered for removal. The result
    is marked partial when the file cap stopped the search early.
    """

    category = CATEGORIES["duplicates"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        options = options or {}
        detector = DuplicateDetector(
            max_files=options.get("max_files", DEFAULT_MAX_FILES),
            aggregator=self.context.aggregator,
        )
        report = await detector.find_duplicates(
            unique_existing(options.get("search_paths") or default_search_paths()),
            max_depth=options.get("max_depth", DEFAULT_MAX_DEPTH),
            min_size=options.get("min_size", DEFAULT_MIN_SIZE),
        )

        items: list[CleanableItem] = []
        for group in report.groups:
            kept = group.kept_item
            items.extend(
                dataclasses.replace(item, name=f"{item.name} (copy of {kept.path})") for item in group.reclaimable
            )
        return ScanResult(category=self.category, items=items, partial=report.partial)

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        return await clean_items(self.category, items, dry_run)
