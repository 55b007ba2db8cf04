"""Scanner for user-owned temporary files."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Sequence

import aiofiles.os

from reclaim.core.context import ScanContext
from reclaim.core.executor import clean_items
from reclaim.models.category import CATEGORIES
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult
from reclaim.models.scanner import ScannerOptions
from reclaim.scanners._common import directory_entries

log = logging.getLogger(__name__)

_DEFAULT_DAYS_OLD = 1


class TempFilesScanner:
    """Finds files in the temp directory owned by the current user and older than a day.

    Recent temp files may still be in use by running applications.
    """

    category = CATEGORIES["temp-files"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    def _temp_dir(self) -> Path:
        return Path(tempfile.gettempdir())

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        options = options or {}
        items = await directory_entries(
            self._temp_dir(),
            self.context.aggregator,
            label="Temp",
            min_age_days=options.get("days_old", _DEFAULT_DAYS_OLD),
        )
        uid = os.getuid()
        owned: list[CleanableItem] = []
        for item in items:
            try:
                st = await aiofiles.os.stat(item.path, follow_symlinks=False)
            except OSError:
                log.debug("Cannot access: %s", item.path)
                continue
            if st.st_uid == uid:
                owned.append(item)
        return ScanResult(category=self.category, items=owned)

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        return await clean_items(self.category, items, dry_run)
