"""JSON file storage for cleaning profiles."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from reclaim.core.errors import ProfileError
from reclaim.utils import xdg_config_home

log = logging.getLogger(__name__)

_DATA_DIR = xdg_config_home() / "reclaim"

PROFILES_FILE = _DATA_DIR / "profiles.json"


@dataclass
class Profile:
    """A named selection of categories, with optional scanner options."""

    id: str
    name: str
    description: str = ""
    categories: list[str] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)


BUILTIN_PROFILES: dict[str, Profile] = {
    "quick": Profile(
        "quick",
        "Quick Clean",
        "Temp files, trash and thumbnails - fast and safe",
        ["temp-files", "trash", "thumbnails"],
    ),
    "developer": Profile(
        "developer",
        "Developer Clean",
        "Package manager caches and Docker",
        ["dev-cache", "docker"],
    ),
    "full": Profile(
        "full",
        "Full Clean",
        "All safe and moderate categories",
        ["temp-files", "trash", "thumbnails", "user-cache", "dev-cache", "docker"],
    ),
}


def _ensure_data_dir() -> None:
    """Create the data directory if it doesn't exist."""
    _DATA_DIR.mkdir(parents=True, exist_ok=True)


def _load_custom() -> dict[str, Profile]:
    if not PROFILES_FILE.exists():
        return {}
    try:
        with open(PROFILES_FILE) as f:
            raw = json.load(f)
        return {pid: Profile(**data) for pid, data in raw.items()}
    except (json.JSONDecodeError, OSError, TypeError, AttributeError):
        log.exception("Failed to load profiles file: %s", PROFILES_FILE)
        return {}


def _save_custom(profiles: dict[str, Profile]) -> None:
    _ensure_data_dir()
    with open(PROFILES_FILE, "w") as f:
        json.dump({pid: asdict(p) for pid, p in profiles.items()}, f, indent=2)


def load_profiles() -> dict[str, Profile]:
    """Built-in profiles followed by the user's custom ones."""
    profiles = dict(BUILTIN_PROFILES)
    for pid, profile in _load_custom().items():
        if pid in BUILTIN_PROFILES:
            log.warning("Custom profile '%s' shadows a built-in profile, ignoring it", pid)
            continue
        profiles[pid] = profile
    return profiles


def get_profile(profile_id: str) -> Profile | None:
    return load_profiles().get(profile_id)


def save_profile(profile: Profile) -> None:
    """Create or replace a custom profile.

    Raises:
        ProfileError: When *profile* would overwrite a built-in profile.
    """
    if profile.id in BUILTIN_PROFILES:
        raise ProfileError(f"Cannot overwrite built-in profile: {profile.id}")
    custom = _load_custom()
    custom[profile.id] = profile
    _save_custom(custom)


def delete_profile(profile_id: str) -> None:
    """Remove a custom profile.

    Raises:
        ProfileError: For built-in or unknown profiles.
    """
    if profile_id in BUILTIN_PROFILES:
        raise ProfileError(f"Cannot delete built-in profile: {profile_id}")
    custom = _load_custom()
    if profile_id not in custom:
        raise ProfileError(f"Profile not found: {profile_id}")
    del custom[profile_id]
    _save_custom(custom)
