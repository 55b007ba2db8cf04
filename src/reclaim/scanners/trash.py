"""Scanner for the user's trash."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from reclaim.core.context import ScanContext
from reclaim.core.executor import clean_items
from reclaim.models.category import CATEGORIES
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult
from reclaim.models.scanner import ScannerOptions
from reclaim.scanners._common import directory_entries
from reclaim.utils import xdg_data_home


class TrashScanner:
    """Empties ~/.local/share/Trash. These files were already deleted by the user."""

    category = CATEGORIES["trash"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    def _trash_dir(self) -> Path:
        return xdg_data_home() / "Trash"

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        items: list[CleanableItem] = []
        for subdir in ("files", "info"):
            items.extend(
                await directory_entries(self._trash_dir() / subdir, self.context.aggregator, label="Trash")
            )
        return ScanResult(category=self.category, items=items)

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        return await clean_items(self.category, items, dry_run)
