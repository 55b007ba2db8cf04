"""Filesystem traversal: recursive size aggregation and item enumeration.

Per-entry errors are never reported from here. An entry that cannot be
stat'ed or listed simply contributes nothing, because a partial answer is
more useful to a cleaner than an aborted scan.
"""

from __future__ import annotations

import asyncio
import logging
import os
import stat
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiofiles.os

from reclaim.core.pool import WorkerPool
from reclaim.models.scan_result import CleanableItem

log = logging.getLogger(__name__)

# Maximum concurrent stat/readdir calls per aggregator.
MAX_CONCURRENT_IO = 20

DEFAULT_MAX_DEPTH = 10

_SECONDS_PER_DAY = 86400


async def _scandir(path: Path | str) -> list[os.DirEntry]:
    """List a directory in the default executor."""
    loop = asyncio.get_running_loop()

    def _list() -> list[os.DirEntry]:
        with os.scandir(path) as entries:
            return list(entries)

    return await loop.run_in_executor(None, _list)


async def _lstat(path: Path | str) -> os.stat_result:
    return await aiofiles.os.stat(path, follow_symlinks=False)


class SizeAggregator:
    """Computes recursive directory sizes with bounded concurrency.

    Every stat and readdir issued by one aggregator, across the whole
    recursion, goes through the same worker pool. A slot is held only for
    the single I/O call, never while waiting on children.
    """

    def __init__(self, concurrency: int = MAX_CONCURRENT_IO) -> None:
        self.pool = WorkerPool(concurrency)

    async def aggregate(self, path: Path | str) -> int:
        """Return the total size in bytes of regular files under *path*.

        A regular file yields its own size; anything that cannot be opened
        yields 0. Symbolic links are not followed.
        """
        try:
            st = await self.pool.run(_lstat, path)
        except OSError:
            log.debug("Cannot stat: %s", path)
            return 0
        if stat.S_ISDIR(st.st_mode):
            return await self._directory_size(path)
        if stat.S_ISREG(st.st_mode):
            return st.st_size
        return 0

    async def _directory_size(self, path: Path | str) -> int:
        try:
            entries = await self.pool.run(_scandir, path)
        except OSError:
            log.debug("Cannot list: %s", path)
            return 0

        tasks = []
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    tasks.append(self._directory_size(entry.path))
                elif entry.is_file(follow_symlinks=False):
                    tasks.append(self._file_size(entry.path))
            except OSError:
                log.debug("Cannot access: %s", entry.path)

        sizes = await asyncio.gather(*tasks)
        return sum(sizes)

    async def _file_size(self, path: str) -> int:
        try:
            st = await self.pool.run(_lstat, path)
        except OSError:
            # Removed mid-scan or unreadable.
            return 0
        return st.st_size


async def aggregate_size(path: Path | str, concurrency: int = MAX_CONCURRENT_IO) -> int:
    """Total size of *path* using a fresh aggregator."""
    return await SizeAggregator(concurrency).aggregate(path)


async def iter_items(
    path: Path | str,
    *,
    recursive: bool = False,
    min_age_days: float | None = None,
    min_size: int | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    files_only: bool = False,
    aggregator: SizeAggregator | None = None,
) -> AsyncIterator[CleanableItem]:
    """Yield removable entries found under *path*.

    Entries newer than *min_age_days* or smaller than *min_size* are
    skipped, and a skipped directory is not descended into. With
    *files_only* only regular files are yielded, directory sizes are never
    computed and every directory is descended regardless of the filters.

    Entries come out in directory listing order.
    """
    aggregator = aggregator or SizeAggregator()
    cutoff = time.time() - min_age_days * _SECONDS_PER_DAY if min_age_days else None

    async def walk(current: Path, depth: int) -> AsyncIterator[CleanableItem]:
        if depth > max_depth:
            return
        try:
            entries = await aggregator.pool.run(_scandir, current)
        except OSError:
            log.debug("Cannot list: %s", current)
            return

        for entry in entries:
            entry_path = Path(entry.path)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_link = entry.is_symlink()
                st = await aggregator.pool.run(_lstat, entry_path)
            except OSError:
                log.debug("Cannot access: %s", entry_path)
                continue

            if files_only:
                if is_dir:
                    if recursive:
                        async for item in walk(entry_path, depth + 1):
                            yield item
                    continue
                if is_link or not stat.S_ISREG(st.st_mode):
                    continue

            if cutoff is not None and st.st_mtime > cutoff:
                continue

            size = await aggregator.aggregate(entry_path) if is_dir else st.st_size
            if min_size and size < min_size:
                continue

            yield CleanableItem(
                path=entry_path,
                size=size,
                name=entry.name,
                is_directory=is_dir,
                modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            )

            if recursive and is_dir:
                async for item in walk(entry_path, depth + 1):
                    yield item

    async for item in walk(Path(path), 0):
        yield item


async def enumerate_items(
    path: Path | str,
    *,
    recursive: bool = False,
    min_age_days: float | None = None,
    min_size: int | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    files_only: bool = False,
    aggregator: SizeAggregator | None = None,
) -> list[CleanableItem]:
    """Collect :func:`iter_items` into a list."""
    return [
        item
        async for item in iter_items(
            path,
            recursive=recursive,
            min_age_days=min_age_days,
            min_size=min_size,
            max_depth=max_depth,
            files_only=files_only,
            aggregator=aggregator,
        )
    ]
