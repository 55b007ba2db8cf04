"""Shared utility functions."""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

# Hard limit for one-shot external commands (seconds).
COMMAND_TIMEOUT = 5.0

_UNITS = ("B", "KB", "MB", "GB", "TB")


def xdg_cache_home() -> Path:
    """Return XDG_CACHE_HOME, defaulting to ~/.cache."""
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def xdg_user_dir(name: str, fallback: str) -> Path:
    """Resolve an XDG user directory such as ``DOWNLOAD`` or ``DOCUMENTS``.

    Reads ``~/.config/user-dirs.dirs`` and falls back to ``~/<fallback>``.
    """
    dirs_file = xdg_config_home() / "user-dirs.dirs"
    if dirs_file.is_file():
        try:
            match = re.search(rf'^XDG_{name}_DIR="(.+)"', dirs_file.read_text(), re.MULTILINE)
        except OSError:
            match = None
        if match:
            return Path(match.group(1).replace("$HOME", str(Path.home())))
    return Path.home() / fallback


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    value = float(size_bytes)
    for unit in _UNITS[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {_UNITS[-1]}"


def parse_size(text: str) -> int:
    """Parse strings like ``500MB`` or ``1.5 GB`` into bytes.

    Plain integers are taken as bytes.

    Raises:
        ValueError: If the string is not a size.
    """
    match = re.fullmatch(r"\s*([\d.]+)\s*([KMGT]?B?)\s*", text, re.IGNORECASE)
    if not match:
        raise ValueError(f"Invalid size: {text!r}")
    value = float(match.group(1))
    unit = match.group(2).upper()
    if unit and not unit.endswith("B"):
        unit += "B"
    exponent = _UNITS.index(unit) if unit else 0
    return int(value * 1024**exponent)


def format_elapsed(seconds: float) -> str:
    """Format an elapsed time as a human-readable string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds) // 60
    secs = seconds - minutes * 60
    return f"{minutes}m {secs:.0f}s"


async def run_command(args: list[str], timeout: float = COMMAND_TIMEOUT) -> str | None:
    """Run an external command and return its stdout.

    Returns None when the command is missing, exits non-zero or does not
    finish within *timeout* seconds; the process is killed on timeout.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError:
        log.debug("Cannot run %s", args[0])
        return None

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        log.debug("%s timed out after %.0fs", args[0], timeout)
        return None

    if proc.returncode != 0:
        log.debug("%s exited with %d: %s", args[0], proc.returncode, stderr.decode(errors="replace").strip())
        return None
    return stdout.decode(errors="replace")


@dataclass(frozen=True, slots=True)
class DiskSpace:
    """Capacity of the filesystem holding a path, in bytes."""

    mount: str
    total: int
    free: int

    @property
    def used(self) -> int:
        return self.total - self.free


async def disk_space(path: Path | str = "/", timeout: float = COMMAND_TIMEOUT) -> DiskSpace | None:
    """Query free space with ``df``; None when df is unavailable."""
    output = await run_command(["df", "-P", "-B1", str(path)], timeout=timeout)
    if output is None:
        return None
    lines = output.strip().splitlines()
    if len(lines) < 2:
        return None
    fields = lines[-1].split()
    try:
        return DiskSpace(mount=fields[-1], total=int(fields[1]), free=int(fields[3]))
    except (IndexError, ValueError):
        log.debug("Unexpected df output: %s", lines[-1])
        return None
