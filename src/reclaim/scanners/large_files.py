"""Scanner for unusually large files in the user's directories."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from reclaim.core.context import ScanContext
from reclaim.core.executor import clean_items
from reclaim.core.fs import enumerate_items
from reclaim.models.category import CATEGORIES
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult
from reclaim.models.scanner import ScannerOptions
from reclaim.scanners._common import unique_existing
from reclaim.utils import xdg_user_dir

DEFAULT_MIN_SIZE = 500 * 1024 * 1024
DEFAULT_MAX_DEPTH = 5


def default_search_paths() -> list[Path]:
    return [
        xdg_user_dir("DOWNLOAD", "Downloads"),
        xdg_user_dir("DOCUMENTS", "Documents"),
        xdg_user_dir("VIDEOS", "Videos"),
    ]


class LargeFilesScanner:
    """Files of at least ``min_size`` bytes, largest first."""

    category = CATEGORIES["large-files"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        options = options or {}
        items: list[CleanableItem] = []
        seen = set()
        for root in unique_existing(options.get("search_paths") or default_search_paths()):
            found = await enumerate_items(
                root,
                recursive=True,
                files_only=True,
                min_size=options.get("min_size", DEFAULT_MIN_SIZE),
                max_depth=options.get("max_depth", DEFAULT_MAX_DEPTH),
                aggregator=self.context.aggregator,
            )
            for item in found:
                if item.path not in seen:
                    seen.add(item.path)
                    items.append(item)
        items.sort(key=lambda i: i.size, reverse=True)
        return ScanResult(category=self.category, items=items)

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        return await clean_items(self.category, items, dry_run)
