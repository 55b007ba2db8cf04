"""Content-addressed duplicate file detection.

Files are first bucketed by exact size, since files of different sizes can
never be duplicates; only buckets with two or more members are hashed.
Hashing streams each file through a fixed buffer so memory stays bounded
by the number of paths seen, not by the bytes on disk.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from contextlib import aclosing
from pathlib import Path
from typing import Iterable

import aiofiles
import aiofiles.os

from reclaim.core.fs import DEFAULT_MAX_DEPTH, SizeAggregator, iter_items
from reclaim.core.pool import WorkerPool
from reclaim.models.duplicate_group import DuplicateGroup, DuplicateReport
from reclaim.models.scan_result import CleanableItem

log = logging.getLogger(__name__)

DEFAULT_MAX_FILES = 100_000
DEFAULT_MIN_SIZE = 1024
DEFAULT_HASH_CONCURRENCY = 4

_CHUNK_SIZE = 65_536  # 64 KB


async def hash_file(path: Path | str, chunk_size: int = _CHUNK_SIZE) -> str:
    """Compute the SHA-256 of a file using chunked reads."""
    h = hashlib.sha256()
    async with aiofiles.open(path, "rb") as f:
        while chunk := await f.read(chunk_size):
            h.update(chunk)
    return h.hexdigest()


class DuplicateDetector:
    """Finds groups of files with identical content.

    Args:
        max_files: Upper bound on files considered in one search. Reaching
            it stops enumeration and marks the report partial.
        hash_concurrency: Files hashed at the same time.
        aggregator: Shared aggregator whose pool throttles directory reads.
    """

    def __init__(
        self,
        max_files: int = DEFAULT_MAX_FILES,
        hash_concurrency: int = DEFAULT_HASH_CONCURRENCY,
        aggregator: SizeAggregator | None = None,
    ) -> None:
        if max_files < 1:
            raise ValueError(f"max_files must be at least 1, got {max_files}")
        self.max_files = max_files
        self.hash_pool = WorkerPool(hash_concurrency)
        self.aggregator = aggregator or SizeAggregator()

    async def find_duplicates(
        self,
        search_paths: Iterable[Path | str],
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
        min_size: int = DEFAULT_MIN_SIZE,
    ) -> DuplicateReport:
        """Search *search_paths* recursively and return confirmed duplicates."""
        buckets, considered, partial = await self._bucket_by_size(search_paths, max_depth, min_size)

        candidates = [items for items in buckets.values() if len(items) >= 2]
        log.debug(
            "%d files considered, %d size buckets to hash%s",
            considered,
            len(candidates),
            " (partial)" if partial else "",
        )

        groups: list[DuplicateGroup] = []
        for confirmed in await asyncio.gather(*(self._split_by_hash(items) for items in candidates)):
            groups.extend(confirmed)

        return DuplicateReport(groups=groups, partial=partial, files_considered=considered)

    async def _bucket_by_size(
        self,
        search_paths: Iterable[Path | str],
        max_depth: int,
        min_size: int,
    ) -> tuple[dict[int, list[CleanableItem]], int, bool]:
        """Phase 1: enumerate files and group them by exact size."""
        buckets: dict[int, list[CleanableItem]] = {}
        seen: set[Path] = set()

        for root in search_paths:
            files = iter_items(
                root,
                recursive=True,
                files_only=True,
                min_size=min_size,
                max_depth=max_depth,
                aggregator=self.aggregator,
            )
            async with aclosing(files):
                async for item in files:
                    if item.path in seen:
                        continue
                    if len(seen) >= self.max_files:
                        return buckets, len(seen), True
                    seen.add(item.path)
                    buckets.setdefault(item.size, []).append(item)

        return buckets, len(seen), False

    async def _split_by_hash(self, items: list[CleanableItem]) -> list[DuplicateGroup]:
        """Phase 2: confirm a size bucket by content hash."""
        items = await self._drop_hard_links(items)
        if len(items) < 2:
            return []
        digests = await asyncio.gather(*(self._hash_or_none(item) for item in items))

        by_hash: dict[str, list[CleanableItem]] = {}
        for item, digest in zip(items, digests):
            if digest is None:
                continue
            item.content_hash = digest
            by_hash.setdefault(digest, []).append(item)

        return [DuplicateGroup(group) for group in by_hash.values() if len(group) >= 2]

    async def _drop_hard_links(self, items: list[CleanableItem]) -> list[CleanableItem]:
        """Keep one path per inode; removing a hard link frees nothing while another remains."""
        unique: list[CleanableItem] = []
        inodes: set[tuple[int, int]] = set()
        for item in items:
            try:
                st = await aiofiles.os.stat(item.path)
            except OSError:
                log.debug("Cannot stat: %s", item.path)
                continue
            key = (st.st_dev, st.st_ino)
            if key in inodes:
                log.debug("Hard link to an already seen file: %s", item.path)
                continue
            inodes.add(key)
            unique.append(item)
        return unique

    async def _hash_or_none(self, item: CleanableItem) -> str | None:
        try:
            return await self.hash_pool.run(hash_file, item.path)
        except OSError:
            # Vanished or unreadable since enumeration; drop it from the bucket.
            log.debug("Cannot hash: %s", item.path)
            return None


async def find_duplicates(
    search_paths: Iterable[Path | str],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    min_size: int = DEFAULT_MIN_SIZE,
    max_files: int = DEFAULT_MAX_FILES,
) -> DuplicateReport:
    """Run a one-off duplicate search with a fresh detector."""
    detector = DuplicateDetector(max_files=max_files)
    return await detector.find_duplicates(search_paths, max_depth=max_depth, min_size=min_size)
