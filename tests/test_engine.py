"""Tests for the scan/clean engine."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from reclaim.core.engine import ReclaimEngine
from reclaim.core.errors import UnknownCategoryError
from reclaim.core.registry import ScannerRegistry
from reclaim.models.category import Category
from reclaim.models.clean_result import CleanResult
from reclaim.models.scan_result import CleanableItem, ScanResult


class Tracker:
    """Counts scans running at the same time."""

    def __init__(self) -> None:
        self.active = 0
        self.peak = 0
        self.started: list[str] = []


class FakeScanner:
    """Test scanner that doesn't touch the filesystem."""

    def __init__(
        self,
        category_id: str = "fake",
        delay: float = 0,
        fail: bool = False,
        fail_clean: bool = False,
        tracker: Tracker | None = None,
        safety_level: str = "safe",
    ):
        self.category = Category(category_id, f"Fake {category_id}", "Test", safety_level)
        self._delay = delay
        self._fail = fail
        self._fail_clean = fail_clean
        self._tracker = tracker
        self.received_options: list[dict | None] = []
        self.clean_calls: list[tuple[list[CleanableItem], bool]] = []

    async def scan(self, options=None) -> ScanResult:
        self.received_options.append(options)
        if self._tracker:
            self._tracker.started.append(self.category.id)
            self._tracker.active += 1
            self._tracker.peak = max(self._tracker.peak, self._tracker.active)
        try:
            await asyncio.sleep(self._delay)
            if self._fail:
                raise RuntimeError("scan failed")
        finally:
            if self._tracker:
                self._tracker.active -= 1
        item = CleanableItem(path=Path(f"/tmp/{self.category.id}"), size=1024, name="fake file")
        return ScanResult(category=self.category, items=[item])

    async def clean(self, items, dry_run=False) -> CleanResult:
        self.clean_calls.append((list(items), dry_run))
        if self._fail_clean:
            raise RuntimeError("clean failed")
        return CleanResult(
            category=self.category,
            cleaned_items=len(items),
            freed_space=sum(i.size for i in items),
        )


def make_engine(*scanners: FakeScanner) -> ReclaimEngine:
    registry = ScannerRegistry()
    for scanner in scanners:
        registry.register(scanner)
    return ReclaimEngine(registry)


@pytest.fixture
def engine():
    return make_engine(FakeScanner("alpha"), FakeScanner("beta"), FakeScanner("gamma"))


class TestRunScans:
    def test_scan_specific_categories(self, engine):
        summary = asyncio.run(engine.run_scans(["beta"]))
        assert [r.category.id for r in summary.results] == ["beta"]
        assert summary.total_size == 1024

    def test_run_all_scans_in_registration_order(self, engine):
        summary = asyncio.run(engine.run_all_scans())
        assert [r.category.id for r in summary.results] == ["alpha", "beta", "gamma"]
        assert summary.total_items == 3

    def test_results_follow_request_order_not_completion(self):
        engine = make_engine(
            FakeScanner("slow", delay=0.05),
            FakeScanner("medium", delay=0.02),
            FakeScanner("fast"),
        )
        summary = asyncio.run(engine.run_scans(["slow", "medium", "fast"], concurrency=3))
        assert [r.category.id for r in summary.results] == ["slow", "medium", "fast"]

    def test_concurrency_cap(self):
        tracker = Tracker()
        engine = make_engine(*(FakeScanner(f"s{i}", delay=0.02, tracker=tracker) for i in range(5)))
        summary = asyncio.run(engine.run_all_scans(concurrency=2))
        assert len(summary.results) == 5
        assert tracker.peak == 2

    def test_sequential_when_concurrency_is_one(self):
        tracker = Tracker()
        engine = make_engine(*(FakeScanner(f"s{i}", delay=0.01, tracker=tracker) for i in range(3)))
        asyncio.run(engine.run_all_scans(concurrency=1))
        assert tracker.peak == 1
        assert tracker.started == ["s0", "s1", "s2"]

    def test_scan_handles_scanner_errors(self):
        engine = make_engine(FakeScanner("good"), FakeScanner("bad", fail=True), FakeScanner("also_good"))
        summary = asyncio.run(engine.run_all_scans())

        assert [r.category.id for r in summary.results] == ["good", "bad", "also_good"]
        bad = summary.get("bad")
        assert bad.error == "scan failed"
        assert bad.items == []
        assert bad.total_size == 0
        assert summary.get("good").items
        assert summary.errors == [bad]

    def test_unknown_category_raises_before_scanning(self):
        scanner = FakeScanner("known")
        engine = make_engine(scanner)
        with pytest.raises(UnknownCategoryError) as exc_info:
            asyncio.run(engine.run_scans(["known", "missing"]))
        assert exc_info.value.category_id == "missing"
        assert scanner.received_options == []

    def test_repeated_ids_scanned_once(self, engine):
        summary = asyncio.run(engine.run_scans(["alpha", "beta", "alpha"]))
        assert [r.category.id for r in summary.results] == ["alpha", "beta"]

    def test_empty_request(self, engine):
        summary = asyncio.run(engine.run_scans([]))
        assert summary.results == []
        assert summary.total_size == 0

    def test_progress_callback(self):
        engine = make_engine(
            FakeScanner("a", delay=0.03),
            FakeScanner("b"),
            FakeScanner("c", delay=0.01),
        )
        events: list[tuple[int, int, str]] = []
        asyncio.run(
            engine.run_all_scans(
                concurrency=3,
                on_progress=lambda done, total, category: events.append((done, total, category.id)),
            )
        )
        assert [done for done, _, _ in events] == [1, 2, 3]
        assert {total for _, total, _ in events} == {3}
        assert [cid for _, _, cid in events] == ["b", "c", "a"]

    def test_progress_reported_for_failed_scans(self):
        engine = make_engine(FakeScanner("bad", fail=True))
        events: list[int] = []
        asyncio.run(engine.run_all_scans(on_progress=lambda done, total, category: events.append(done)))
        assert events == [1]

    def test_options_for_scanner(self):
        alpha, beta = FakeScanner("alpha"), FakeScanner("beta")
        engine = make_engine(alpha, beta)

        def options_for(category):
            return {"days_old": 7} if category.id == "alpha" else None

        asyncio.run(engine.run_all_scans(options_for_scanner=options_for))
        assert alpha.received_options == [{"days_old": 7}]
        assert beta.received_options == [None]

    def test_engine_reusable_across_event_loops(self, engine):
        first = asyncio.run(engine.run_all_scans(concurrency=2))
        second = asyncio.run(engine.run_all_scans(concurrency=2))
        assert first.total_size == second.total_size


class TestClean:
    def test_clean_selection_in_order(self, engine):
        summary = asyncio.run(engine.run_all_scans())
        selection = [(r.category.id, r.items) for r in reversed(summary.results)]

        result = asyncio.run(engine.clean(selection))
        assert [r.category.id for r in result.results] == ["gamma", "beta", "alpha"]
        assert result.total_freed_space == 3 * 1024
        assert result.total_cleaned_items == 3

    def test_clean_accepts_mapping(self, engine):
        item = CleanableItem(path=Path("/tmp/alpha"), size=10, name="x")
        result = asyncio.run(engine.clean({"alpha": [item]}))
        assert result.results[0].freed_space == 10

    def test_clean_passes_dry_run(self):
        scanner = FakeScanner("alpha")
        engine = make_engine(scanner)
        asyncio.run(engine.clean([("alpha", [])], dry_run=True))
        assert scanner.clean_calls == [([], True)]

    def test_clean_handles_scanner_errors(self):
        good = FakeScanner("good")
        engine = make_engine(FakeScanner("bad", fail_clean=True), good)
        item = CleanableItem(path=Path("/tmp/x"), size=5, name="x")

        result = asyncio.run(engine.clean([("bad", [item]), ("good", [item])]))
        bad = result.results[0]
        assert bad.category.id == "bad"
        assert bad.freed_space == 0
        assert bad.errors == ["Scanner crashed during cleaning: clean failed"]
        assert result.results[1].freed_space == 5
        assert result.total_errors == 1

    def test_clean_unknown_category(self, engine):
        with pytest.raises(UnknownCategoryError):
            asyncio.run(engine.clean([("nope", [])]))

    def test_clean_progress(self, engine):
        events: list[tuple[int, int]] = []
        asyncio.run(
            engine.clean(
                [("alpha", []), ("beta", [])],
                on_progress=lambda done, total, category: events.append((done, total)),
            )
        )
        assert events == [(1, 2), (2, 2)]
