"""Per-invocation state shared by scanners."""

from __future__ import annotations

from dataclasses import dataclass, field

from reclaim.core.fs import SizeAggregator
from reclaim.settings import Config


@dataclass
class ScanContext:
    """Everything a scan needs, built once by the caller and passed down.

    Holding the configuration and the size aggregator here keeps them out
    of module globals, so each test or command builds its own.
    """

    config: Config = field(default_factory=Config)
    aggregator: SizeAggregator | None = None

    def __post_init__(self) -> None:
        if self.aggregator is None:
            self.aggregator = SizeAggregator(self.config.io_concurrency)
