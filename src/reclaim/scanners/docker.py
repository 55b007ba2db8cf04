"""Scanner for reclaimable Docker data."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Sequence

from reclaim.core.context import ScanContext
from reclaim.core.errors import ErrorCode, ScannerError
from reclaim.models.category import CATEGORIES
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult
from reclaim.models.scanner import ScannerOptions
from reclaim.utils import run_command

log = logging.getLogger(__name__)

# Docker reports sizes with SI prefixes.
_MULTIPLIERS = {
    "B": 1,
    "KB": 1000,
    "MB": 1000**2,
    "GB": 1000**3,
    "TB": 1000**4,
}

_PRUNE_COMMANDS = {
    "images": ["docker", "image", "prune", "-af"],
    "containers": ["docker", "container", "prune", "-f"],
    "local-volumes": ["docker", "volume", "prune", "-f"],
    "build-cache": ["docker", "builder", "prune", "-af"],
}

_PRUNE_TIMEOUT = 300


def parse_docker_size(text: str) -> int:
    """Parse sizes such as ``1.2GB`` or ``512kB (40%)`` into bytes."""
    match = re.match(r"\s*([\d.]+)\s*([kKMGT]?B)", text)
    if not match:
        return 0
    return int(float(match.group(1)) * _MULTIPLIERS[match.group(2).upper()])


def _kind(item: CleanableItem) -> str:
    return str(item.path).removeprefix("docker:")


class DockerScanner:
    """Unused images, stopped containers, dangling volumes and build cache."""

    category = CATEGORIES["docker"]

    def __init__(self, context: ScanContext | None = None) -> None:
        self.context = context or ScanContext()

    async def scan(self, options: ScannerOptions | None = None) -> ScanResult:
        output = await run_command(
            ["docker", "system", "df", "--format", "{{.Type}}\t{{.Size}}\t{{.Reclaimable}}"]
        )
        items: list[CleanableItem] = []
        for line in (output or "").strip().splitlines():
            parts = line.split("\t")
            if len(parts) != 3:
                continue
            kind, _size, reclaimable = parts
            size = parse_docker_size(reclaimable)
            if size > 0:
                items.append(
                    CleanableItem(
                        path=Path("docker:" + kind.strip().lower().replace(" ", "-")),
                        size=size,
                        name=f"Docker {kind.strip()}",
                    )
                )
        return ScanResult(category=self.category, items=items)

    async def clean(self, items: Sequence[CleanableItem], dry_run: bool = False) -> CleanResult:
        result = CleanResult(category=self.category)
        for item in items:
            command = _PRUNE_COMMANDS.get(_kind(item))
            if command is None:
                result.skipped.append(item.path)
                continue
            if not dry_run and await run_command(command, timeout=_PRUNE_TIMEOUT) is None:
                failure = ScannerError(ErrorCode.UNKNOWN, f"'{' '.join(command)}' failed", item.path)
                result.failures.append(failure)
                result.errors.append(str(failure))
                continue
            result.cleaned_items += 1
            result.freed_space += item.size
        return result
