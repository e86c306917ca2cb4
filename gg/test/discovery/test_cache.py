"""Tests for discovery/cache.py."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from gg.core.config import DiscoveryConfig
from gg.core.repo import RepoIdentity
from gg.core.result import Err, Ok, Result
from gg.discovery.cache import CACHE_FORMAT_VERSION, CacheRecord, RepoCache
from gg.discovery.scanner import ScanError

A = RepoIdentity(Path("/h/a"))
B = RepoIdentity(Path("/h/b"))
C = RepoIdentity(Path("/h/c"))


class FakeScanner:
    """Scanner stand-in that counts calls."""

    def __init__(self, result: Result[tuple[RepoIdentity, ...], ScanError]) -> None:
        self.result = result
        self.calls = 0

    def __call__(self, config: DiscoveryConfig) -> Result[tuple[RepoIdentity, ...], ScanError]:
        self.calls += 1
        return self.result


@pytest.fixture
def config() -> DiscoveryConfig:
    return DiscoveryConfig(root=Path("/h"), ignore=())


@pytest.fixture
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "repos.json"


# =============================================================================
# CacheRecord
# =============================================================================


class TestCacheRecord:
    def test_round_trip(self) -> None:
        record = CacheRecord("f" * 64, (A, B), datetime(2026, 1, 1, tzinfo=UTC))

        parsed = CacheRecord.from_json(json.dumps(record.to_dict()))

        assert parsed == record

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "not json",
            "[]",
            '{"version": 999, "fingerprint": "x", "created_at": "2026-01-01", "repos": []}',
            '{"version": 1, "created_at": "2026-01-01", "repos": []}',
            '{"version": 1, "fingerprint": "x", "created_at": "yesterday", "repos": []}',
            '{"version": 1, "fingerprint": "x", "created_at": "2026-01-01", "repos": [1]}',
        ],
    )
    def test_rejects_bad_input(self, text: str) -> None:
        assert CacheRecord.from_json(text) is None

    def test_deduplicates_repos(self) -> None:
        text = json.dumps(
            {
                "version": CACHE_FORMAT_VERSION,
                "fingerprint": "x",
                "created_at": "2026-01-01T00:00:00+00:00",
                "repos": ["/h/b", "/h/a", "/h/b"],
            }
        )
        record = CacheRecord.from_json(text)
        assert record is not None
        assert record.repos == (A, B)


# =============================================================================
# RepoCache
# =============================================================================


class TestLoadOrScan:
    def test_first_run_scans_and_persists(self, config: DiscoveryConfig, cache_path: Path) -> None:
        scanner = FakeScanner(Ok((A, B)))
        cache = RepoCache(cache_path, config, scanner=scanner)

        assert cache.load_or_scan() == Ok((A, B))
        assert scanner.calls == 1
        assert cache_path.exists()

    def test_matching_fingerprint_skips_scan(
        self, config: DiscoveryConfig, cache_path: Path
    ) -> None:
        RepoCache(cache_path, config, scanner=FakeScanner(Ok((A,)))).rescan()

        scanner = FakeScanner(Ok((B,)))
        cache = RepoCache(cache_path, config, scanner=scanner)

        assert cache.load_or_scan() == Ok((A,))
        assert scanner.calls == 0

    def test_changed_settings_trigger_rescan(
        self, config: DiscoveryConfig, cache_path: Path
    ) -> None:
        RepoCache(cache_path, config, scanner=FakeScanner(Ok((A,)))).rescan()

        changed = DiscoveryConfig(root=Path("/h"), ignore=("vendor",))
        scanner = FakeScanner(Ok((B,)))
        cache = RepoCache(cache_path, changed, scanner=scanner)

        assert cache.load_or_scan() == Ok((B,))
        assert scanner.calls == 1

    def test_corrupt_file_triggers_rescan(
        self, config: DiscoveryConfig, cache_path: Path
    ) -> None:
        cache_path.parent.mkdir(parents=True)
        cache_path.write_text("{ truncated", encoding="utf-8")
        scanner = FakeScanner(Ok((C,)))

        result = RepoCache(cache_path, config, scanner=scanner).load_or_scan()

        assert result == Ok((C,))
        assert scanner.calls == 1
        record = CacheRecord.from_json(cache_path.read_text(encoding="utf-8"))
        assert record is not None
        assert record.repos == (C,)

    def test_failed_scan_leaves_file(self, config: DiscoveryConfig, cache_path: Path) -> None:
        RepoCache(cache_path, config, scanner=FakeScanner(Ok((A,)))).rescan()
        before = cache_path.read_text(encoding="utf-8")

        failing = FakeScanner(Err(ScanError("gone", Path("/h"))))
        result = RepoCache(cache_path, config, scanner=failing).rescan()

        assert isinstance(result, Err)
        assert cache_path.read_text(encoding="utf-8") == before

    def test_unwritable_cache_still_returns_repos(
        self, config: DiscoveryConfig, tmp_path: Path
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        scanner = FakeScanner(Ok((A,)))
        cache = RepoCache(blocker / "repos.json", config, scanner=scanner)

        assert cache.load_or_scan() == Ok((A,))
        assert cache.load_or_scan() == Ok((A,))
        assert scanner.calls == 2


class TestForget:
    def test_persists_remaining(self, config: DiscoveryConfig, cache_path: Path) -> None:
        cache = RepoCache(cache_path, config, scanner=FakeScanner(Ok((A, B, C))))
        cache.rescan()

        assert cache.forget((A, B, C), [B]) == (A, C)

        record = cache.read()
        assert record is not None
        assert record.repos == (A, C)
        assert record.fingerprint == config.fingerprint()

    def test_nothing_missing_does_not_write(
        self, config: DiscoveryConfig, cache_path: Path
    ) -> None:
        cache = RepoCache(cache_path, config, scanner=FakeScanner(Ok((A,))))

        assert cache.forget((A,), [B]) == (A,)
        assert not cache_path.exists()


class TestAge:
    def test_none_without_file(self, config: DiscoveryConfig, cache_path: Path) -> None:
        assert RepoCache(cache_path, config).age() is None

    def test_measured_from_mtime(self, config: DiscoveryConfig, cache_path: Path) -> None:
        cache = RepoCache(cache_path, config, scanner=FakeScanner(Ok(())))
        cache.rescan()
        mtime = datetime.fromtimestamp(cache_path.stat().st_mtime, UTC)

        assert cache.age(now=mtime + timedelta(hours=2)) == timedelta(hours=2)
        assert cache.age(now=mtime - timedelta(hours=1)) == timedelta(0)
