"""Central scanner registry."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from reclaim.core.errors import UnknownCategoryError
from reclaim.models.scanner import Scanner

log = logging.getLogger(__name__)


class ScannerRegistry:
    """Stores scanners keyed by category id, in registration order."""

    def __init__(self) -> None:
        self._scanners: dict[str, Scanner] = {}

    def register(self, scanner: Scanner) -> None:
        """Register a scanner instance."""
        category_id = scanner.category.id
        if category_id in self._scanners:
            log.warning("Scanner for '%s' already registered, skipping duplicate", category_id)
            return
        self._scanners[category_id] = scanner
        log.debug("Registered scanner: %s (%s)", category_id, scanner.category.name)

    def get(self, category_id: str) -> Scanner | None:
        """Get a scanner by its category ID."""
        return self._scanners.get(category_id)

    def resolve(self, category_ids: Iterable[str]) -> list[Scanner]:
        """Look up one scanner per ID, keeping order and dropping repeats.

        Raises:
            UnknownCategoryError: For the first ID without a scanner.
        """
        resolved: dict[str, Scanner] = {}
        for category_id in category_ids:
            scanner = self._scanners.get(category_id)
            if scanner is None:
                raise UnknownCategoryError(category_id)
            resolved.setdefault(category_id, scanner)
        return list(resolved.values())

    def get_all(self) -> list[Scanner]:
        """Get all registered scanners."""
        return list(self._scanners.values())

    def ids(self) -> list[str]:
        return list(self._scanners)

    def get_by_group(self, group: str) -> list[Scanner]:
        """Get all scanners whose category belongs to *group*."""
        return [s for s in self._scanners.values() if s.category.group == group]

    def get_by_safety(self, *levels: str) -> list[Scanner]:
        """Get all scanners whose category has one of the given safety levels."""
        return [s for s in self._scanners.values() if s.category.safety_level in levels]

    def __len__(self) -> int:
        return len(self._scanners)

    def __iter__(self) -> Iterator[Scanner]:
        return iter(self._scanners.values())

    def __contains__(self, category_id: str) -> bool:
        return category_id in self._scanners
