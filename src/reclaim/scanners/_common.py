"""Helpers shared by the built-in scanners."""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import aiofiles.os

from reclaim.core.fs import SizeAggregator, enumerate_items
from reclaim.models.scan_result import CleanableItem

log = logging.getLogger(__name__)


async def directory_entries(
    directory: Path,
    aggregator: SizeAggregator,
    *,
    label: str,
    exclude: Iterable[str] = (),
    min_age_days: float | None = None,
) -> list[CleanableItem]:
    """Top-level entries of *directory* with a non-zero size, labelled for display."""
    excluded = set(exclude)
    items = await enumerate_items(directory, min_age_days=min_age_days, aggregator=aggregator)
    return [
        dataclasses.replace(item, name=f"{label}: {item.name}")
        for item in items
        if item.size > 0 and item.name not in excluded
    ]


async def directory_item(path: Path, name: str, aggregator: SizeAggregator) -> CleanableItem | None:
    """A whole directory as one item, or None when missing or empty."""
    try:
        st = await aiofiles.os.stat(path)
    except OSError:
        return None
    size = await aggregator.aggregate(path)
    if size <= 0:
        return None
    return CleanableItem(
        path=path,
        size=size,
        name=name,
        is_directory=True,
        modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
    )


def unique_existing(paths: Iterable[Path | str]) -> list[Path]:
    """Existing directories from *paths*, without repeats, in order."""
    result: list[Path] = []
    for raw in paths:
        path = Path(raw).expanduser()
        if path.is_dir() and path not in result:
            result.append(path)
    return result
