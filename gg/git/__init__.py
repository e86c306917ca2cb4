"""Git operations module.

- Repository: read-only queries on a single working directory
- inspect: one QueryKind against one repository, failures as data

Usage:
    from gg.git import QueryKind, inspect

    outcome = inspect(Path("/path/to/repo"), QueryKind.STASHED)
"""

from gg.git.inspector import (
    FailureReason,
    QueryFailure,
    QueryKind,
    QueryValue,
    inspect,
)
from gg.git.repository import (
    BranchAhead,
    GitError,
    GitStatus,
    Repository,
    StatusEntry,
)

__all__ = [
    # Repository
    "BranchAhead",
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    # Inspector
    "FailureReason",
    "QueryFailure",
    "QueryKind",
    "QueryValue",
    "inspect",
]
