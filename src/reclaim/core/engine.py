"""Scanning and cleaning orchestration engine."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, Mapping, Sequence

from reclaim.core.pool import WorkerPool
from reclaim.core.registry import ScannerRegistry
from reclaim.models.category import Category
from reclaim.models.clean_result import CleanResult, CleanSummary
from reclaim.models.scan_result import CleanableItem, ScanResult, ScanSummary
from reclaim.models.scanner import Scanner, ScannerOptions

log = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 4

OptionsForScanner = Callable[[Category], "ScannerOptions | None"]
ProgressCallback = Callable[[int, int, Category], None]  # (completed, total, category)

Selection = Mapping[str, Sequence[CleanableItem]] | Iterable[tuple[str, Sequence[CleanableItem]]]


class ReclaimEngine:
    """Orchestrates scanning and cleaning across scanners."""

    def __init__(self, registry: ScannerRegistry) -> None:
        self.registry = registry

    async def run_scans(
        self,
        category_ids: Iterable[str],
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        options_for_scanner: OptionsForScanner | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ScanSummary:
        """Scan the requested categories concurrently.

        At most *concurrency* scans are in flight; the next queued scan is
        admitted as soon as one finishes. A scanner that raises produces an
        empty result carrying the error instead of failing the run.
        Results follow the order of *category_ids*, not completion order.

        Args:
            category_ids: Categories to scan. Repeated IDs are scanned once.
            concurrency: Maximum number of scans running at once.
            options_for_scanner: Maps a category to the options passed to its
                scanner's ``scan``.
            on_progress: Called after every completed scan with the number
                completed so far, the total and the category just finished.
                Meant for interactive feedback only.

        Raises:
            UnknownCategoryError: If an ID has no registered scanner. Raised
                before any scan starts.
        """
        scanners = self.registry.resolve(category_ids)
        pool = WorkerPool(concurrency)
        total = len(scanners)
        completed = 0

        async def run_one(scanner: Scanner) -> ScanResult:
            nonlocal completed
            async with pool:
                result = await self._scan_one(scanner, options_for_scanner)
            completed += 1
            if on_progress:
                on_progress(completed, total, scanner.category)
            return result

        results = await asyncio.gather(*(run_one(s) for s in scanners))
        return ScanSummary(results=list(results))

    async def run_all_scans(
        self,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        options_for_scanner: OptionsForScanner | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ScanSummary:
        """Scan every registered category, in registration order."""
        return await self.run_scans(
            self.registry.ids(),
            concurrency=concurrency,
            options_for_scanner=options_for_scanner,
            on_progress=on_progress,
        )

    @staticmethod
    async def _scan_one(scanner: Scanner, options_for_scanner: OptionsForScanner | None) -> ScanResult:
        category = scanner.category
        try:
            options = options_for_scanner(category) if options_for_scanner else None
            return await scanner.scan(options)
        except Exception as exc:
            log.exception("Scanner '%s' failed during scan", category.id)
            return ScanResult(category=category, error=str(exc) or type(exc).__name__)

    async def clean(
        self,
        selection: Selection,
        *,
        dry_run: bool = False,
        on_progress: ProgressCallback | None = None,
    ) -> CleanSummary:
        """Clean the selected items, one category after another.

        Args:
            selection: ``(category_id, items)`` pairs or a mapping of them.
            dry_run: Simulate removal without touching the filesystem.
            on_progress: Called after each category with the running count.

        Raises:
            UnknownCategoryError: If a category has no registered scanner.
        """
        pairs = list(selection.items()) if isinstance(selection, Mapping) else list(selection)
        scanners = {s.category.id: s for s in self.registry.resolve(cid for cid, _ in pairs)}
        summary = CleanSummary()

        for index, (category_id, items) in enumerate(pairs, 1):
            scanner = scanners[category_id]
            try:
                result = await scanner.clean(items, dry_run)
            except Exception as exc:
                log.exception("Scanner '%s' failed during clean", category_id)
                result = CleanResult(category=scanner.category, errors=[f"Scanner crashed during cleaning: {exc}"])
            summary.results.append(result)
            if on_progress:
                on_progress(index, len(pairs), scanner.category)

        return summary
