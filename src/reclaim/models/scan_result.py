"""Scan result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from reclaim.models.category import Category


@dataclass(slots=True)
class CleanableItem:
    """Single file or directory that can be removed.

    ``size`` of a directory is the recursive total measured at scan time.
    ``content_hash`` is only filled in by the duplicate detector.
    """

    path: Path
    size: int
    name: str
    is_directory: bool = False
    modified_at: datetime | None = None
    content_hash: str | None = None


@dataclass(slots=True)
class ScanResult:
    """Result of scanning one category."""

    category: Category
    items: list[CleanableItem] = field(default_factory=list)
    error: str = ""
    partial: bool = False

    @property
    def total_size(self) -> int:
        return sum(item.size for item in self.items)


@dataclass(slots=True)
class ScanSummary:
    """Results of several scans, in the order they were requested."""

    results: list[ScanResult] = field(default_factory=list)

    @property
    def total_size(self) -> int:
        return sum(r.total_size for r in self.results)

    @property
    def total_items(self) -> int:
        return sum(len(r.items) for r in self.results)

    @property
    def errors(self) -> list[ScanResult]:
        """Results whose scanner failed."""
        return [r for r in self.results if r.error]

    def get(self, category_id: str) -> ScanResult | None:
        for result in self.results:
            if result.category.id == category_id:
                return result
        return None
