"""Tests for cli/dispatch.py."""

from __future__ import annotations

import tomllib
from datetime import timedelta
from pathlib import Path

import pytest

from gg.cli.context import CLIContext
from gg.cli.dispatch import COMMANDS, format_age, run_command
from gg.core.config import Config, DiscoveryConfig
from gg.core.errors import ErrorCode
from gg.core.repo import RepoIdentity
from gg.core.result import Err, Ok, Result
from gg.discovery.cache import RepoCache
from gg.discovery.scanner import ScanError
from gg.git.inspector import FailureReason, QueryFailure, QueryKind
from gg.git.repository import StatusEntry
from gg.output.console import MockConsole
from gg.query.executor import QueryExecutor, QueryOutcome

A = RepoIdentity(Path("/h/a"))
B = RepoIdentity(Path("/h/b"))
C = RepoIdentity(Path("/h/c"))


def fake_inspector(path: Path, kind: QueryKind, *, include_untracked: bool = True) -> QueryOutcome:
    """/h/a is clean, /h/b has one unstaged file, /h/c was deleted."""
    if path == C.path:
        return Err(QueryFailure(FailureReason.MISSING, f"{path} no longer exists"))
    if path == B.path and kind in (QueryKind.STATUS, QueryKind.UNSTAGED):
        return Ok((StatusEntry(" M", "notes.txt"),))
    return Ok(())


def make_ctx(
    tmp_path: Path,
    *,
    found: Result[tuple[RepoIdentity, ...], ScanError] | None = None,
    ignore: tuple[str, ...] = (".cargo",),
) -> CLIContext:
    discovery = DiscoveryConfig(root=Path("/h"), ignore=ignore)
    config = Config(
        discovery=discovery,
        cache_path=tmp_path / "cache" / "repos.json",
        config_path=tmp_path / "config" / "config.toml",
    )
    scan_result = found if found is not None else Ok((A, B, C))
    return CLIContext(
        config=config,
        console=MockConsole(),
        cache=RepoCache(config.cache_path, discovery, scanner=lambda _cfg: scan_result),
        executor=QueryExecutor(max_workers=3, inspector=fake_inspector),
    )


# =============================================================================
# Query subcommands
# =============================================================================


class TestQueries:
    def test_status_reports_findings_and_heals_cache(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path)
        assert isinstance(ctx.cache.rescan(), Ok)

        result = run_command("status", ctx)

        assert isinstance(result, Ok)
        findings = result.value.findings()
        assert [e.repo for e in findings] == [B, C]
        assert findings[0].outcome == Ok((StatusEntry(" M", "notes.txt"),))
        assert isinstance(findings[1].outcome, Err)

        record = ctx.cache.read()
        assert record is not None
        assert record.repos == (A, B)

    def test_list_shows_every_cached_repo(self, tmp_path: Path) -> None:
        result = run_command("list", make_ctx(tmp_path))

        assert isinstance(result, Ok)
        assert [e.repo for e in result.value.findings()] == [A, B, C]

    def test_failed_scan_is_a_config_error(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path, found=Err(ScanError("Scan root is not accessible", Path("/h"))))

        result = run_command("status", ctx)

        assert isinstance(result, Err)
        assert result.error.code is ErrorCode.CONFIG_ERROR


# =============================================================================
# Other subcommands
# =============================================================================


class TestScan:
    def test_message(self, tmp_path: Path) -> None:
        result = run_command("scan", make_ctx(tmp_path))

        assert isinstance(result, Ok)
        assert result.value.messages == ("Found 3 repos. Use `git global list` to show them.",)


class TestInfo:
    def test_lines(self, tmp_path: Path) -> None:
        result = run_command("info", make_ctx(tmp_path))

        assert isinstance(result, Ok)
        messages = result.value.messages
        assert messages[0].startswith("git-global ")
        assert "Number of repos: 3" in messages
        assert "Base directory: /h" in messages
        assert any(m.startswith("Cache file age: 0d, 0h, 0m") for m in messages)
        assert "  .cargo" in messages
        assert "Default command: status" in messages
        assert "Show untracked: true" in messages


class TestIgnore:
    def test_adds_pattern_to_config_file(self, tmp_path: Path) -> None:
        ctx = make_ctx(tmp_path)

        result = run_command("ignore", ctx, pattern=" vendor ")

        assert isinstance(result, Ok)
        assert result.value.messages == (
            "Added 'vendor' to the ignore list. Run `git global scan` to update the cache.",
        )
        assert ctx.config.config_path is not None
        data = tomllib.loads(ctx.config.config_path.read_text(encoding="utf-8"))
        assert data["global"]["ignore"] == [".cargo", "vendor"]

    def test_already_ignored(self, tmp_path: Path) -> None:
        result = run_command("ignore", make_ctx(tmp_path), pattern=".cargo")

        assert isinstance(result, Ok)
        assert result.value.messages == ("'.cargo' is already ignored.",)

    def test_requires_pattern(self, tmp_path: Path) -> None:
        result = run_command("ignore", make_ctx(tmp_path), pattern="  ")

        assert isinstance(result, Err)
        assert result.error.code is ErrorCode.USER_ERROR


class TestIgnored:
    def test_lists_patterns(self, tmp_path: Path) -> None:
        result = run_command("ignored", make_ctx(tmp_path, ignore=("a", "b")))

        assert isinstance(result, Ok)
        assert result.value.messages == ("Ignored patterns (2):", "  a", "  b")

    def test_empty(self, tmp_path: Path) -> None:
        result = run_command("ignored", make_ctx(tmp_path, ignore=()))

        assert isinstance(result, Ok)
        assert result.value.messages == ("No patterns are currently ignored.",)


def test_unknown_subcommand(tmp_path: Path) -> None:
    result = run_command("frobnicate", make_ctx(tmp_path))

    assert isinstance(result, Err)
    assert result.error.message == "Unknown subcommand, frobnicate."
    assert result.error.code is ErrorCode.USER_ERROR


def test_every_query_kind_has_a_command() -> None:
    assert {kind.value for kind in QueryKind} <= set(COMMANDS)


@pytest.mark.parametrize(
    ("age", "expected"),
    [
        (timedelta(0), "0d, 0h, 0m, 0s"),
        (timedelta(days=1, hours=2, minutes=3, seconds=4), "1d, 2h, 3m, 4s"),
        (timedelta(seconds=59.9), "0d, 0h, 0m, 59s"),
    ],
)
def test_format_age(age: timedelta, expected: str) -> None:
    assert format_age(age) == expected
