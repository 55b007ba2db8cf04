"""Tests for the built-in scanners."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from reclaim.core.errors import ErrorCode
from reclaim.models.scan_result import CleanableItem
from reclaim.scanners import docker as docker_module
from reclaim.scanners.dev_cache import DevCacheScanner
from reclaim.scanners.docker import DockerScanner, parse_docker_size
from reclaim.scanners.downloads import DownloadsScanner
from reclaim.scanners.duplicates import DuplicatesScanner
from reclaim.scanners.large_files import LargeFilesScanner
from reclaim.scanners.temp_files import TempFilesScanner
from reclaim.scanners.thumbnails import ThumbnailsScanner
from reclaim.scanners.trash import TrashScanner
from reclaim.scanners.user_cache import UserCacheScanner


class TestTrashScanner:
    def test_scan_and_clean(self, fake_home, make_file):
        trash = fake_home / ".local" / "share" / "Trash"
        make_file(trash / "files" / "old.txt", 100)
        make_file(trash / "info" / "old.txt.trashinfo", 20)

        scanner = TrashScanner()
        result = asyncio.run(scanner.scan())
        assert result.total_size == 120
        assert sorted(i.name for i in result.items) == ["Trash: old.txt", "Trash: old.txt.trashinfo"]

        cleaned = asyncio.run(scanner.clean(result.items))
        assert cleaned.freed_space == 120
        assert not (trash / "files" / "old.txt").exists()

    def test_missing_trash(self, fake_home):
        result = asyncio.run(TrashScanner().scan())
        assert result.items == []
        assert not result.error


class TestThumbnailsScanner:
    def test_scan(self, fake_home, make_file):
        make_file(fake_home / ".cache" / "thumbnails" / "normal" / "a.png", 300)
        result = asyncio.run(ThumbnailsScanner().scan())
        assert [(i.name, i.size) for i in result.items] == [("Thumbnails: normal", 300)]


class TestUserCacheScanner:
    def test_excludes_protected_and_owned_dirs(self, fake_home, make_file):
        cache = fake_home / ".cache"
        make_file(cache / "someapp" / "blob", 100)
        make_file(cache / "fontconfig" / "cache-7", 100)
        make_file(cache / "thumbnails" / "normal" / "a.png", 100)
        make_file(cache / "pip" / "http" / "x", 100)
        (cache / "emptyapp").mkdir()

        result = asyncio.run(UserCacheScanner().scan())
        assert [i.name for i in result.items] == ["Cache: someapp"]


class TestDevCacheScanner:
    def test_finds_tool_caches(self, fake_home, make_file):
        make_file(fake_home / ".cache" / "pip" / "http" / "wheel", 50)
        make_file(fake_home / ".npm" / "_cacache" / "index", 70)

        result = asyncio.run(DevCacheScanner().scan())
        assert {i.name: i.size for i in result.items} == {"pip": 50, "npm": 70}
        assert all(i.is_directory for i in result.items)

    def test_clean_recreates_directories(self, fake_home, make_file):
        pip_cache = fake_home / ".cache" / "pip"
        make_file(pip_cache / "http" / "wheel", 50)

        scanner = DevCacheScanner()
        result = asyncio.run(scanner.scan())
        cleaned = asyncio.run(scanner.clean(result.items))

        assert cleaned.freed_space == 50
        assert pip_cache.is_dir()
        assert list(pip_cache.iterdir()) == []

    def test_dry_run_keeps_cache(self, fake_home, make_file):
        wheel = make_file(fake_home / ".cache" / "pip" / "http" / "wheel", 50)
        scanner = DevCacheScanner()
        result = asyncio.run(scanner.scan())
        cleaned = asyncio.run(scanner.clean(result.items, dry_run=True))
        assert cleaned.freed_space == 50
        assert wheel.exists()


class TestDownloadsScanner:
    def test_only_old_entries(self, fake_home, make_file):
        downloads = fake_home / "Downloads"
        make_file(downloads / "old.zip", 100, age_days=45)
        make_file(downloads / "new.zip", 100)

        result = asyncio.run(DownloadsScanner().scan())
        assert [i.name for i in result.items] == ["old.zip"]

    def test_days_old_option(self, fake_home, make_file):
        downloads = fake_home / "Downloads"
        make_file(downloads / "week.zip", 100, age_days=10)

        assert asyncio.run(DownloadsScanner().scan()).items == []
        assert len(asyncio.run(DownloadsScanner().scan({"days_old": 7})).items) == 1

    def test_respects_user_dirs_file(self, fake_home, make_file):
        make_file(
            fake_home / ".config" / "user-dirs.dirs",
            content=b'XDG_DOWNLOAD_DIR="$HOME/Stahovani"\n',
        )
        make_file(fake_home / "Stahovani" / "old.iso", 10, age_days=60)
        result = asyncio.run(DownloadsScanner().scan())
        assert [i.path for i in result.items] == [fake_home / "Stahovani" / "old.iso"]


class TestLargeFilesScanner:
    def test_largest_first(self, fake_home, make_file):
        videos = fake_home / "Videos"
        make_file(videos / "a.mkv", 2000)
        make_file(videos / "season" / "b.mkv", 5000)
        make_file(videos / "small.srt", 10)

        result = asyncio.run(
            LargeFilesScanner().scan({"min_size": 1000, "search_paths": [videos, videos / "season"]})
        )
        assert [(i.name, i.size) for i in result.items] == [("b.mkv", 5000), ("a.mkv", 2000)]


class TestDuplicatesScanner:
    def test_offers_older_copies(self, fake_home, make_file):
        docs = fake_home / "Documents"
        old = make_file(docs / "report.pdf", content=b"%PDF" * 512, age_days=5)
        new = make_file(docs / "copy" / "report.pdf", content=b"%PDF" * 512)

        result = asyncio.run(DuplicatesScanner().scan({"search_paths": [docs]}))

        assert not result.partial
        assert [i.path for i in result.items] == [old]
        assert result.items[0].name == f"report.pdf (copy of {new})"
        assert result.total_size == 2048

    def test_partial_flag(self, fake_home, make_file):
        docs = fake_home / "Documents"
        for i in range(4):
            make_file(docs / f"f{i}.bin", content=b"z" * 2048)
        result = asyncio.run(DuplicatesScanner().scan({"search_paths": [docs], "max_files": 2}))
        assert result.partial
        assert len(result.items) == 1


class TestTempFilesScanner:
    def test_only_old_entries(self, tmp_path, make_file, monkeypatch):
        temp = tmp_path / "tmp"
        make_file(temp / "stale.tmp", 100, age_days=3)
        make_file(temp / "fresh.tmp", 100)
        monkeypatch.setattr(TempFilesScanner, "_temp_dir", lambda self: temp)

        result = asyncio.run(TempFilesScanner().scan())
        assert [i.name for i in result.items] == ["Temp: stale.tmp"]


DOCKER_DF = (
    "Images\t4.2GB\t3.1GB (73%)\n"
    "Containers\t12kB\t0B (0%)\n"
    "Local Volumes\t1.5GB\t500MB (33%)\n"
    "Build Cache\t800MB\t800MB\n"
)


class TestDockerScanner:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("3.1GB (73%)", 3_100_000_000),
            ("512kB", 512_000),
            ("0B", 0),
            ("800MB", 800_000_000),
            ("n/a", 0),
        ],
    )
    def test_parse_docker_size(self, text, expected):
        assert parse_docker_size(text) == expected

    def test_scan(self, monkeypatch):
        async def fake_run(args, timeout=5.0):
            assert args[:3] == ["docker", "system", "df"]
            return DOCKER_DF

        monkeypatch.setattr(docker_module, "run_command", fake_run)
        result = asyncio.run(DockerScanner().scan())

        assert [str(i.path) for i in result.items] == ["docker:images", "docker:local-volumes", "docker:build-cache"]
        assert result.total_size == 3_100_000_000 + 500_000_000 + 800_000_000

    def test_docker_unavailable(self, monkeypatch):
        async def fake_run(args, timeout=5.0):
            return None

        monkeypatch.setattr(docker_module, "run_command", fake_run)
        result = asyncio.run(DockerScanner().scan())
        assert result.items == []
        assert not result.error

    def test_clean_runs_prune(self, monkeypatch):
        calls: list[list[str]] = []

        async def fake_run(args, timeout=5.0):
            calls.append(args)
            return None if args[1] == "volume" else ""

        monkeypatch.setattr(docker_module, "run_command", fake_run)
        items = [
            CleanableItem(path=Path("docker:images"), size=100, name="Docker Images"),
            CleanableItem(path=Path("docker:local-volumes"), size=50, name="Docker Local Volumes"),
            CleanableItem(path=Path("docker:mystery"), size=5, name="?"),
        ]
        result = asyncio.run(DockerScanner().clean(items))

        assert calls == [["docker", "image", "prune", "-af"], ["docker", "volume", "prune", "-f"]]
        assert result.freed_space == 100
        assert result.cleaned_items == 1
        assert result.skipped == [Path("docker:mystery")]
        assert result.failures[0].code is ErrorCode.UNKNOWN

    def test_clean_dry_run(self, monkeypatch):
        calls: list[list[str]] = []

        async def fake_run(args, timeout=5.0):
            calls.append(args)
            return ""

        monkeypatch.setattr(docker_module, "run_command", fake_run)
        items = [CleanableItem(path=Path("docker:images"), size=100, name="Docker Images")]
        result = asyncio.run(DockerScanner().clean(items, dry_run=True))
        assert calls == []
        assert result.freed_space == 100
