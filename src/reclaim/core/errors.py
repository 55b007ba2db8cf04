"""Error classification for filesystem operations."""

from __future__ import annotations

import errno
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ReclaimError(Exception):
    """Base class for errors raised by reclaim."""


class UnknownCategoryError(ReclaimError, KeyError):
    """Raised when a requested category has no registered scanner."""

    def __init__(self, category_id: str) -> None:
        super().__init__(category_id)
        self.category_id = category_id

    def __str__(self) -> str:
        return f"Unknown category: {self.category_id}"


class UnsafePathError(ReclaimError, ValueError):
    """Raised when a user supplied path resolves to a protected location."""


class ProfileError(ReclaimError):
    """Raised for invalid profile operations."""


class ErrorCode(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    LOCKED = "locked"
    PATH_TOO_LONG = "path_too_long"
    DISK_FULL = "disk_full"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


_ERRNO_CODES: dict[int, ErrorCode] = {
    errno.EACCES: ErrorCode.PERMISSION_DENIED,
    errno.EPERM: ErrorCode.PERMISSION_DENIED,
    errno.EROFS: ErrorCode.PERMISSION_DENIED,
    errno.ENOENT: ErrorCode.NOT_FOUND,
    errno.EBUSY: ErrorCode.LOCKED,
    errno.ENOTEMPTY: ErrorCode.LOCKED,
    errno.ETXTBSY: ErrorCode.LOCKED,
    errno.ENAMETOOLONG: ErrorCode.PATH_TOO_LONG,
    errno.ENOSPC: ErrorCode.DISK_FULL,
    errno.EDQUOT: ErrorCode.DISK_FULL,
    errno.ETIMEDOUT: ErrorCode.TIMEOUT,
}

_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.PERMISSION_DENIED: "Access denied",
    ErrorCode.NOT_FOUND: "File or directory not found",
    ErrorCode.LOCKED: "File or directory is in use",
    ErrorCode.PATH_TOO_LONG: "Path exceeds maximum length",
    ErrorCode.DISK_FULL: "No space left on device",
    ErrorCode.TIMEOUT: "Operation timed out",
}

_SUGGESTIONS: dict[ErrorCode, str] = {
    ErrorCode.PERMISSION_DENIED: "Access denied. Try running with elevated privileges.",
    ErrorCode.NOT_FOUND: "Not found. It may have been moved or deleted.",
    ErrorCode.LOCKED: "In use. Close related applications and try again.",
    ErrorCode.PATH_TOO_LONG: "Path too long. Try moving it to a shorter path.",
    ErrorCode.DISK_FULL: "Disk full. Free up space and try again.",
    ErrorCode.TIMEOUT: "Timed out. Try again or check system resources.",
}


@dataclass(frozen=True, slots=True)
class ScannerError:
    """A classified failure for a single path."""

    code: ErrorCode
    message: str
    path: Path | None = None

    def __str__(self) -> str:
        return error_suggestion(self)


def classify_error(error: BaseException, path: Path | str | None = None) -> ScannerError:
    """Map an exception onto the error taxonomy using its errno."""
    target = Path(path) if path is not None else None

    if isinstance(error, TimeoutError):
        code = ErrorCode.TIMEOUT
    elif isinstance(error, OSError) and error.errno is not None:
        code = _ERRNO_CODES.get(error.errno, ErrorCode.UNKNOWN)
    else:
        code = ErrorCode.UNKNOWN

    if code is ErrorCode.UNKNOWN:
        message = getattr(error, "strerror", None) or str(error) or type(error).__name__
    else:
        message = _MESSAGES[code]
    return ScannerError(code=code, message=message, path=target)


def error_suggestion(error: ScannerError) -> str:
    """Render a user-facing line with a suggested action."""
    subject = str(error.path) if error.path is not None else "Operation"
    hint = _SUGGESTIONS.get(error.code, error.message)
    return f"{subject} - {hint}"


def is_recoverable(error: ScannerError) -> bool:
    """Whether retrying the operation later could plausibly succeed."""
    return error.code in (ErrorCode.LOCKED, ErrorCode.TIMEOUT)
