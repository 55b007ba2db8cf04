"""Removal of previously scanned items."""

from __future__ import annotations

import asyncio
import logging
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import aiofiles.os

from reclaim.core.errors import ScannerError, classify_error
from reclaim.core.paths import is_system_path
from reclaim.models.category import Category
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem

log = logging.getLogger(__name__)


@dataclass(slots=True)
class RemovalOutcome:
    """Accumulated result of removing a batch of items."""

    cleaned_items: int = 0
    freed_space: int = 0
    skipped: list[Path] = field(default_factory=list)
    failures: list[ScannerError] = field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        return [str(f) for f in self.failures]


async def remove_path(path: Path) -> None:
    """Remove a file, symlink or directory tree.

    Raises:
        OSError: When the path is missing or cannot be removed.
    """
    st = await aiofiles.os.stat(path, follow_symlinks=False)
    if stat.S_ISDIR(st.st_mode):
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, shutil.rmtree, path)
    else:
        await aiofiles.os.remove(path)


async def remove_items(items: Sequence[CleanableItem], dry_run: bool = False) -> RemovalOutcome:
    """Remove *items* one by one and report what happened.

    Protected system paths are always skipped, even in a dry run. In a dry
    run nothing is touched and every other item counts as removed. Freed
    space is the size recorded at scan time. A failing item is classified
    and recorded; it never stops the batch.
    """
    outcome = RemovalOutcome()

    for item in items:
        if is_system_path(item.path):
            log.warning("Skipping protected system path: %s", item.path)
            outcome.skipped.append(item.path)
            continue

        if dry_run:
            outcome.cleaned_items += 1
            outcome.freed_space += item.size
            continue

        try:
            await remove_path(item.path)
        except OSError as exc:
            failure = classify_error(exc, item.path)
            log.debug("Cannot remove %s: %s", item.path, failure.message)
            outcome.failures.append(failure)
            continue

        outcome.cleaned_items += 1
        outcome.freed_space += item.size

    return outcome


async def clean_items(category: Category, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
    """Default ``clean`` for scanners whose items are plain paths."""
    outcome = await remove_items(items, dry_run=dry_run)
    return CleanResult(
        category=category,
        cleaned_items=outcome.cleaned_items,
        freed_space=outcome.freed_space,
        errors=outcome.errors,
        skipped=outcome.skipped,
        failures=outcome.failures,
    )
