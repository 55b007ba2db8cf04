"""Shared test fixtures."""

from __future__ import annotations

import os
import time

import pytest

import reclaim.core.loader as loader
import reclaim.storage as storage


@pytest.fixture
def isolate_storage(tmp_path, monkeypatch):
    """Redirect profile storage to a temp directory."""
    data_dir = tmp_path / "reclaim_data"
    data_dir.mkdir()
    profiles_file = data_dir / "profiles.json"
    monkeypatch.setattr(storage, "PROFILES_FILE", profiles_file)
    monkeypatch.setattr(storage, "_DATA_DIR", data_dir)
    return profiles_file


@pytest.fixture
def fake_home(tmp_path, monkeypatch):
    """Point HOME and the XDG base directories at a temp directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(home / ".local" / "share"))
    monkeypatch.setattr(loader, "USER_SCANNER_DIR", home / ".local" / "share" / "reclaim" / "scanners")
    return home


def _make_file(path, size: int = 0, *, content: bytes | None = None, age_days: float = 0):
    """Create a file with *size* bytes (or *content*) and an mtime *age_days* in the past."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content if content is not None else b"x" * size)
    if age_days:
        stamp = time.time() - age_days * 86400
        os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def make_file():
    return _make_file
