"""JSON-backed configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Callable

from reclaim.core.paths import expand_path
from reclaim.core.errors import UnsafePathError
from reclaim.models.category import Category
from reclaim.models.scanner import ScannerOptions
from reclaim.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "reclaim"
_SETTINGS_FILE = "config.json"

DEFAULT_CONFIG_PATH = xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE


@dataclass
class Config:
    """Parsed configuration with defaults for every key."""

    concurrency: int = 4
    parallel_scans: bool = True
    io_concurrency: int = 20
    exclude_categories: list[str] = field(default_factory=list)
    default_categories: list[str] = field(default_factory=list)
    downloads_days_old: int = 30
    large_files_min_size: int = 500 * 1024 * 1024
    duplicates_min_size: int = 1024
    duplicates_max_files: int = 100_000
    extra_paths: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a config from raw JSON data, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            log.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def scan_concurrency(self) -> int:
        """Scanner pool size, 1 when parallel scans are disabled."""
        return max(1, self.concurrency) if self.parallel_scans else 1

    def paths_for(self, key: str) -> list[Path]:
        """Expanded extra paths for *key*; unsafe entries are dropped."""
        paths: list[Path] = []
        for raw in self.extra_paths.get(key, []):
            try:
                paths.append(expand_path(raw))
            except UnsafePathError as exc:
                log.warning("%s", exc)
        return paths


class Settings:
    """Configuration file with dot-notation access.

        settings.get("extra_paths.duplicates")  # reads data["extra_paths"]["duplicates"]
        settings.set("concurrency", 8)  # writes + saves
    """

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or DEFAULT_CONFIG_PATH
        self._data: dict[str, Any] = {}
        self._load()

    @property
    def exists(self) -> bool:
        return self.path.exists()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self.save()

    def config(self) -> Config:
        """Parse the stored data into a :class:`Config`."""
        try:
            return Config.from_dict(self._data)
        except TypeError as e:
            log.warning("Invalid configuration in %s: %s", self.path, e)
            return Config()

    def init(self) -> bool:
        """Write a default configuration file; False if one already exists."""
        if self.exists:
            return False
        self._data = Config(
            extra_paths={
                "duplicates": ["~/Downloads", "~/Documents", "~/Desktop"],
                "large_files": ["~/Downloads", "~/Documents", "~/Videos"],
            }
        ).to_dict()
        self.save()
        return True

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self.path, e)
            return
        if isinstance(data, dict):
            self._data = data
        else:
            log.warning("Ignoring settings in %s: expected a JSON object", self.path)

    def save(self) -> None:
        """Persist settings to disk."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )


def scanner_options(config: Config) -> Callable[[Category], ScannerOptions | None]:
    """Build the per-category options function handed to the scan engine."""

    def options_for(category: Category) -> ScannerOptions | None:
        match category.id:
            case "downloads":
                return {"days_old": config.downloads_days_old}
            case "large-files":
                options: ScannerOptions = {"min_size": config.large_files_min_size}
                if paths := config.paths_for("large_files"):
                    options["search_paths"] = paths
                return options
            case "duplicates":
                options = {
                    "min_size": config.duplicates_min_size,
                    "max_files": config.duplicates_max_files,
                }
                if paths := config.paths_for("duplicates"):
                    options["search_paths"] = paths
                return options
            case _:
                return None

    return options_for
