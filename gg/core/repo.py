"""Repository identity.

A repository is identified by the canonical absolute path of its working
directory. The path is resolved once, when the scanner finds the repository,
and stored as-is from then on.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

__all__ = ["RepoIdentity", "unique_sorted"]


@dataclass(frozen=True, slots=True, order=True)
class RepoIdentity:
    """A git repository known to git-global.

    Attributes:
        path: Canonical, absolute path to the working directory.
    """

    path: Path

    @classmethod
    def discovered(cls, path: Path) -> RepoIdentity:
        """Create an identity for a freshly discovered directory (resolves symlinks)."""
        return cls(path=path.resolve())

    @classmethod
    def from_str(cls, raw: str) -> RepoIdentity:
        """Create an identity from a stored path, without re-resolving it."""
        return cls(path=Path(raw))

    def __str__(self) -> str:
        return str(self.path)


def unique_sorted(repos: Iterable[RepoIdentity]) -> tuple[RepoIdentity, ...]:
    """Collapse duplicate identities and order them by path."""
    return tuple(sorted(set(repos)))
