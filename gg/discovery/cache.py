"""Durable cache of the discovered repository set.

The cache is one JSON file:

    {
      "version": 1,
      "fingerprint": "<sha256 of the DiscoveryConfig>",
      "created_at": "2026-01-01T12:00:00+00:00",
      "repos": ["/home/me/src/a", "/home/me/src/b"]
    }

A record is trusted only when its version and fingerprint match the
current ones. Anything else, including an unreadable file, means "rescan".
Writes go through a temp file and os.replace, so a crash mid-write leaves
the previous record in place. Concurrent processes are not locked against
each other; the last writer wins.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from gg.core.config import DiscoveryConfig
from gg.core.repo import RepoIdentity, unique_sorted
from gg.core.result import Err, Ok, Result
from gg.core.structured import as_str_dict, get_str, get_str_list
from gg.discovery.scanner import ScanError, scan
from gg.platform.files import atomic_write_json, read_text_or_none

__all__ = ["CACHE_FORMAT_VERSION", "CacheRecord", "RepoCache"]

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = 1

type Scanner = Callable[[DiscoveryConfig], Result[tuple[RepoIdentity, ...], ScanError]]


@dataclass(frozen=True, slots=True)
class CacheRecord:
    """One persisted scan result.

    Attributes:
        fingerprint: Fingerprint of the DiscoveryConfig that produced it
        repos: Repositories, sorted by path
        created_at: When the record was written (UTC)
    """

    fingerprint: str
    repos: tuple[RepoIdentity, ...]
    created_at: datetime

    def to_dict(self) -> dict[str, object]:
        return {
            "version": CACHE_FORMAT_VERSION,
            "fingerprint": self.fingerprint,
            "created_at": self.created_at.isoformat(),
            "repos": [str(r.path) for r in self.repos],
        }

    @classmethod
    def from_json(cls, text: str) -> CacheRecord | None:
        """Parse a cache file. Returns None for anything unexpected."""
        try:
            data = as_str_dict(json.loads(text))
        except json.JSONDecodeError:
            return None
        if data is None or data.get("version") != CACHE_FORMAT_VERSION:
            return None

        fingerprint = get_str(data, "fingerprint")
        created = get_str(data, "created_at")
        paths = get_str_list(data, "repos")
        if fingerprint is None or created is None or paths is None:
            return None
        try:
            created_at = datetime.fromisoformat(created)
        except ValueError:
            return None

        return cls(
            fingerprint=fingerprint,
            repos=unique_sorted(RepoIdentity.from_str(p) for p in paths),
            created_at=created_at,
        )


class RepoCache:
    """Read-through, write-through cache of one DiscoveryConfig's repositories.

    An explicit object handed to whatever needs the repository set; there is
    no module-level cache state.
    """

    def __init__(
        self,
        path: Path,
        config: DiscoveryConfig,
        *,
        scanner: Scanner = scan,
    ) -> None:
        self.path = path
        self.config = config
        self._scanner = scanner

    def read(self) -> CacheRecord | None:
        """Read the persisted record, or None if absent or unreadable."""
        text = read_text_or_none(self.path)
        if text is None:
            return None
        record = CacheRecord.from_json(text)
        if record is None:
            logger.warning("Ignoring unreadable cache file %s", self.path)
        return record

    def load_or_scan(self) -> Result[tuple[RepoIdentity, ...], ScanError]:
        """Return the cached repositories, scanning first if the cache is stale."""
        record = self.read()
        fingerprint = self.config.fingerprint()
        if record is not None and record.fingerprint == fingerprint:
            logger.debug("Using %d cached repos from %s", len(record.repos), self.path)
            return Ok(record.repos)

        if record is not None:
            logger.info("Discovery settings changed since last scan; rescanning")
        return self.rescan()

    def rescan(self) -> Result[tuple[RepoIdentity, ...], ScanError]:
        """Scan unconditionally and replace the cache on success.

        A failed scan leaves the existing cache file untouched.
        """
        result = self._scanner(self.config)
        if isinstance(result, Err):
            return result
        self._persist(result.value)
        return result

    def forget(
        self, repos: Iterable[RepoIdentity], missing: Iterable[RepoIdentity]
    ) -> tuple[RepoIdentity, ...]:
        """Drop repositories confirmed gone from disk and persist the remainder.

        Args:
            repos: The repository set in use by this invocation
            missing: Repositories found to no longer exist

        Returns:
            The corrected repository set.
        """
        current = unique_sorted(repos)
        gone = set(missing)
        if not gone & set(current):
            return current

        kept = tuple(r for r in current if r not in gone)
        logger.info("Removing %d missing repos from cache", len(current) - len(kept))
        self._persist(kept)
        return kept

    def age(self, now: datetime | None = None) -> timedelta | None:
        """Time since the cache file was last written, or None if there is none."""
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return None
        current = now or datetime.now(UTC)
        return max(current - datetime.fromtimestamp(mtime, UTC), timedelta(0))

    def _persist(self, repos: tuple[RepoIdentity, ...]) -> None:
        record = CacheRecord(
            fingerprint=self.config.fingerprint(),
            repos=unique_sorted(repos),
            created_at=datetime.now(UTC),
        )
        try:
            atomic_write_json(self.path, record.to_dict())
        except OSError as e:
            logger.warning(
                "Could not write cache file %s (%s); results are not cached", self.path, e
            )
