"""Per-repository queries.

``inspect`` is the single entry point the query executor calls for every
repository. It takes a ``QueryKind`` and returns either the value for that
kind or a ``QueryFailure`` saying why the repository could not answer.

| kind     | value                          |
|----------|--------------------------------|
| STATUS   | tuple[StatusEntry, ...]        |
| STAGED   | tuple[StatusEntry, ...]        |
| UNSTAGED | tuple[StatusEntry, ...]        |
| STASHED  | tuple[str, ...]                |
| AHEAD    | tuple[BranchAhead, ...]        |
| LIST     | () (no git call)               |
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from gg.core.result import Err, Ok, Result
from gg.git.repository import BranchAhead, GitError, Repository, StatusEntry

__all__ = [
    "FailureReason",
    "QueryFailure",
    "QueryKind",
    "QueryValue",
    "inspect",
]

type QueryValue = tuple[StatusEntry, ...] | tuple[str, ...] | tuple[BranchAhead, ...]

_CORRUPTION_MARKERS = (
    "bad object",
    "bad ref",
    "broken",
    "corrupt",
    "invalid object",
    "unable to read",
    "not a valid object",
)


class QueryKind(Enum):
    """The fleet-wide questions git-global can ask."""

    STATUS = "status"
    STAGED = "staged"
    UNSTAGED = "unstaged"
    STASHED = "stashed"
    AHEAD = "ahead"
    LIST = "list"

    def __str__(self) -> str:
        return self.value

    @property
    def lists_everything(self) -> bool:
        """True if every repository is a finding, whatever its outcome."""
        return self is QueryKind.LIST

    @property
    def pads_output(self) -> bool:
        """True if text output separates repositories with a blank line."""
        return self in (QueryKind.STATUS, QueryKind.STAGED, QueryKind.UNSTAGED, QueryKind.STASHED)


class FailureReason(Enum):
    MISSING = "missing"
    NOT_A_REPOSITORY = "not_a_repository"
    CORRUPTED_REFERENCES = "corrupted_references"
    OPERATION_FAILED = "operation_failed"

    def __str__(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True, slots=True)
class QueryFailure:
    """Why a repository could not answer a query.

    Attributes:
        reason: Failure category
        message: Human-readable detail (usually git's stderr)
    """

    reason: FailureReason
    message: str

    @classmethod
    def from_git(cls, error: GitError) -> QueryFailure:
        lowered = error.message.lower()
        if not error.timed_out and any(marker in lowered for marker in _CORRUPTION_MARKERS):
            return cls(FailureReason.CORRUPTED_REFERENCES, error.message)
        return cls(FailureReason.OPERATION_FAILED, error.message)


def inspect(
    path: Path, kind: QueryKind, *, include_untracked: bool = True
) -> Result[QueryValue, QueryFailure]:
    """Answer one query for the repository at path."""
    if kind is QueryKind.LIST:
        return Ok(())

    if not path.is_dir():
        return Err(QueryFailure(FailureReason.MISSING, f"{path} no longer exists"))

    repo = Repository(path)
    if not repo.exists():
        return Err(QueryFailure(FailureReason.NOT_A_REPOSITORY, f"{path} has no .git"))

    result: Result[QueryValue, GitError]
    match kind:
        case QueryKind.STATUS:
            result = repo.status(include_untracked=include_untracked).map(lambda s: s.entries)
        case QueryKind.STAGED:
            result = repo.status(include_untracked=False).map(lambda s: s.staged)
        case QueryKind.UNSTAGED:
            result = repo.status(include_untracked=include_untracked).map(
                lambda s: s.unstaged + s.untracked
            )
        case QueryKind.STASHED:
            result = repo.stash_list()
        case QueryKind.AHEAD:
            result = repo.branches_ahead()

    if isinstance(result, Err):
        return Err(QueryFailure.from_git(result.error))
    return result
