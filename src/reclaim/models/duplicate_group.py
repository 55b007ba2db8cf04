"""Duplicate detection results."""

from __future__ import annotations

from dataclasses import dataclass, field

from reclaim.models.scan_result import CleanableItem


def _retention_key(item: CleanableItem) -> tuple[float, str]:
    mtime = item.modified_at.timestamp() if item.modified_at is not None else float("-inf")
    return (-mtime, str(item.path))


@dataclass(slots=True)
class DuplicateGroup:
    """Files sharing the same size and content hash.

    The most recently modified file is kept; equal timestamps fall back to
    the lexicographically smallest path so the choice is deterministic.
    """

    items: list[CleanableItem]

    def __post_init__(self) -> None:
        if len(self.items) < 2:
            raise ValueError("A duplicate group needs at least two items")
        self.items = sorted(self.items, key=_retention_key)

    @property
    def kept_item(self) -> CleanableItem:
        return self.items[0]

    @property
    def reclaimable(self) -> list[CleanableItem]:
        return self.items[1:]

    @property
    def size(self) -> int:
        """Size of a single copy."""
        return self.items[0].size

    @property
    def reclaimable_size(self) -> int:
        return sum(item.size for item in self.reclaimable)


@dataclass(slots=True)
class DuplicateReport:
    """Outcome of a duplicate search.

    ``partial`` is set when the file cap was reached before the search
    paths were fully enumerated.
    """

    groups: list[DuplicateGroup] = field(default_factory=list)
    partial: bool = False
    files_considered: int = 0

    @property
    def reclaimable_size(self) -> int:
        return sum(g.reclaimable_size for g in self.groups)
