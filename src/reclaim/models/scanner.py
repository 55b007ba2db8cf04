"""Scanner capability protocol."""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from reclaim.models.category import Category
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult

ScannerOptions = dict[str, Any]


@runtime_checkable
class Scanner(Protocol):
    """Anything that can scan and clean one category.

    ``scan`` MUST NOT delete anything. ``clean`` receives items previously
    returned by ``scan`` and must not mutate them.
    """

    category: Category

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult: ...

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult: ...
