"""Git repository abstraction.

This module provides the Repository class, a thin wrapper around the ``git``
executable for the read-only queries git-global needs. All operations
return Result types.

Usage:
    repo = Repository(Path("/path/to/repo"))

    match repo.status(include_untracked=False):
        case Ok(status):
            for entry in status.unstaged:
                print(entry.xy, entry.path)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from gg.core.result import Err, Ok, Result
from gg.platform.process import ProcessError
from gg.platform.process import run as run_process

GIT_TIMEOUT_SECONDS = 30.0

__all__ = [
    "BranchAhead",
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]

_TRACK_RE = re.compile(r"\[([^\]]+)\]")


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's stderr when available)
        returncode: Process return code
        timed_out: True if git was killed after the timeout
    """

    command: str
    message: str
    returncode: int = 1
    timed_out: bool = False


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry in git status.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_staged(self) -> bool:
        """True if file has staged changes."""
        return self.xy not in ("??", "!!") and self.xy[0] != " "

    @property
    def is_unstaged(self) -> bool:
        """True if file has unstaged changes."""
        return self.xy not in ("??", "!!") and self.xy[1] != " "

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    def __str__(self) -> str:
        return f"{self.xy} {self.path}"


@dataclass(frozen=True, slots=True)
class BranchAhead:
    """A local branch with commits its upstream does not have."""

    branch: str
    ahead: int

    def __str__(self) -> str:
        return f"{self.branch}: {self.ahead} ahead"


@dataclass(frozen=True, slots=True)
class GitStatus:
    """Parsed ``git status --porcelain=v1`` output.

    Attributes:
        entries: All status entries (staged, unstaged, untracked)
    """

    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def staged(self) -> tuple[StatusEntry, ...]:
        return tuple(e for e in self.entries if e.is_staged)

    @property
    def unstaged(self) -> tuple[StatusEntry, ...]:
        return tuple(e for e in self.entries if e.is_unstaged)

    @property
    def untracked(self) -> tuple[StatusEntry, ...]:
        return tuple(e for e in self.entries if e.is_untracked)


class Repository:
    """Read-only git operations on a single working directory.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check for a .git marker (directory, or file for worktrees/submodules)."""
        return (self.path / ".git").exists()

    def status(self, *, include_untracked: bool = True) -> Result[GitStatus, GitError]:
        """Get repository status.

        Runs ``git status --porcelain=v1`` and parses the output.
        """
        untracked = "--untracked-files=all" if include_untracked else "--untracked-files=no"
        result = self._run(["status", "--porcelain=v1", untracked])
        match result:
            case Err(e):
                return Err(self._error("status", e))
            case Ok(stdout):
                return Ok(parse_status(stdout))

    def stash_list(self) -> Result[tuple[str, ...], GitError]:
        """Get one description line per stash entry, newest first."""
        result = self._run(["stash", "list"])
        match result:
            case Err(e):
                return Err(self._error("stash list", e))
            case Ok(stdout):
                return Ok(tuple(ln for ln in stdout.splitlines() if ln.strip()))

    def branches_ahead(self) -> Result[tuple[BranchAhead, ...], GitError]:
        """Get local branches that are ahead of their upstream.

        Branches without an upstream are not reported.
        """
        result = self._run(
            ["for-each-ref", "--format=%(refname:short)%09%(upstream:track)", "refs/heads"]
        )
        match result:
            case Err(e):
                return Err(self._error("for-each-ref", e))
            case Ok(stdout):
                return Ok(parse_branches_ahead(stdout))

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=GIT_TIMEOUT_SECONDS
        )

    @staticmethod
    def _error(command: str, e: ProcessError) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or f"git {command} failed",
            returncode=e.returncode,
            timed_out=e.timed_out,
        )


def parse_status(output: str) -> GitStatus:
    """Parse ``git status --porcelain=v1`` output.

    A ``##`` branch header, present when ``-b`` was given, is skipped.
    """
    lines = [ln for ln in output.splitlines() if ln.strip() and not ln.startswith("##")]
    return GitStatus(entries=_parse_entries(lines))


def parse_branches_ahead(output: str) -> tuple[BranchAhead, ...]:
    """Parse ``for-each-ref`` lines of the form ``<branch>\\t[ahead N, behind M]``."""
    found: list[BranchAhead] = []
    for line in output.splitlines():
        name, _, track = line.partition("\t")
        if not name.strip():
            continue
        ahead = _parse_ahead(track)
        if ahead:
            found.append(BranchAhead(branch=name.strip(), ahead=ahead))
    return tuple(found)


def _parse_entries(lines: list[str]) -> tuple[StatusEntry, ...]:
    entries: list[StatusEntry] = []
    for line in lines:
        # Format: "XY path"; renames are "XY old -> new".
        if len(line) < 4:
            continue
        entries.append(StatusEntry(xy=line[:2], path=line[3:]))
    return tuple(entries)


def _parse_ahead(track: str) -> int:
    """Commits ahead in an upstream:track value such as ``[ahead 2, behind 1]``."""
    match = _TRACK_RE.search(track)
    if not match:
        return 0
    ahead = re.search(r"ahead\s+(\d+)", match.group(1))
    return int(ahead.group(1)) if ahead else 0
