"""Protected system locations."""

from __future__ import annotations

import ntpath
import os
import posixpath
import re
from pathlib import Path

from reclaim.core.errors import UnsafePathError

# Operating system trees, recycle bin internals and volume metadata.
_POSIX_SYSTEM_PATHS = (
    "/bin",
    "/boot",
    "/dev",
    "/etc",
    "/lib",
    "/lib32",
    "/lib64",
    "/libx32",
    "/lost+found",
    "/proc",
    "/run",
    "/sbin",
    "/snap",
    "/sys",
    "/usr",
    "/var/lib",
    "/System",
    "/Library",
    "/private/var/db",
)

_WINDOWS_SYSTEM_PATHS = (
    "c:\\windows",
    "c:\\program files",
    "c:\\program files (x86)",
    "c:\\programdata",
    "c:\\recovery",
    "c:\\boot",
)

# Present at the root of every Windows volume, whatever its drive letter.
_WINDOWS_VOLUME_PATHS = (
    "\\$recycle.bin",
    "\\system volume information",
)

_WINDOWS_PATH = re.compile(r"^[a-zA-Z]:|\\")


def _within(path: str, roots: tuple[str, ...], sep: str) -> bool:
    return any(path == root or path.startswith(root + sep) for root in roots)


def is_system_path(target: Path | str) -> bool:
    """Check whether a path lies inside a location that must never be removed.

    Windows style paths (drive letter or backslashes) are compared
    case-insensitively against the Windows denylist, everything else
    against the POSIX one. The filesystem root itself is protected too.
    """
    raw = str(target)
    if _WINDOWS_PATH.search(raw):
        normalized = ntpath.normpath(raw).lower()
        if re.fullmatch(r"[a-z]:\\?", normalized):
            return True
        _drive, rest = ntpath.splitdrive(normalized)
        return _within(normalized, _WINDOWS_SYSTEM_PATHS, "\\") or _within(rest, _WINDOWS_VOLUME_PATHS, "\\")

    absolute = os.path.abspath(raw)
    # The parent is resolved, the entry itself is not: removing a symlink
    # only unlinks it, but a path reached through a linked directory lands
    # wherever that directory points.
    parent, name = os.path.split(absolute)
    candidates = {posixpath.normpath(absolute), posixpath.normpath(os.path.join(os.path.realpath(parent), name))}
    return any(path == "/" or _within(path, _POSIX_SYSTEM_PATHS, "/") for path in candidates)


def expand_path(raw: str) -> Path:
    """Expand ``~`` and make a user supplied path absolute.

    Raises:
        UnsafePathError: If the path resolves into a protected location.
    """
    expanded = Path(os.path.abspath(os.path.expanduser(raw)))
    if is_system_path(expanded) or is_system_path(os.path.realpath(expanded)):
        raise UnsafePathError(f"Unsafe path: {raw} resolves to protected system path {expanded}")
    return expanded
