"""Repository discovery.

Walks the scan root depth-first and records every directory that holds a
``.git`` marker. Rules applied at each directory:

1. A directory matching an ignore pattern is skipped with its whole subtree.
2. A repository is recorded by its canonical path and not descended into.
3. Symlinked directories are entered only with ``follow_symlinks``; a
   canonical path already visited is never entered twice.
4. With ``same_filesystem``, directories on another device than the root
   are not entered.

Unreadable directories are skipped. Only a missing root is an error.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

from gg.core.config import DiscoveryConfig
from gg.core.repo import RepoIdentity, unique_sorted
from gg.core.result import Err, Ok, Result

__all__ = ["ScanError", "is_ignored", "scan"]

logger = logging.getLogger(__name__)

GIT_MARKER = ".git"


@dataclass(frozen=True, slots=True)
class ScanError:
    """The scan could not start."""

    message: str
    root: Path


def _device_of(path: Path) -> int:
    return os.stat(path).st_dev


def is_ignored(path: Path, root: Path, patterns: tuple[str, ...]) -> bool:
    """True if path matches any ignore pattern.

    A pattern is tried against the directory name, the path relative to the
    scan root, and the absolute path, so ``vendor``, ``work/vendor`` and
    ``*/node_modules`` all work as expected.
    """
    if not patterns:
        return False
    name = path.name
    try:
        relative = path.relative_to(root).as_posix()
    except ValueError:
        relative = name
    absolute = path.as_posix()
    return any(
        fnmatchcase(name, pattern) or fnmatchcase(relative, pattern) or fnmatchcase(absolute, pattern)
        for pattern in patterns
    )


class _Walker:
    def __init__(self, config: DiscoveryConfig, root: Path, root_device: int) -> None:
        self._config = config
        self._root = root
        self._root_device = root_device
        self._visited: set[Path] = {root.resolve()}
        self.found: list[RepoIdentity] = []

    def run(self) -> None:
        stack = [self._root]
        while stack:
            current = stack.pop()
            try:
                is_repo = (current / GIT_MARKER).exists()
            except OSError as e:
                logger.debug("Skipping unreadable directory %s: %s", current, e)
                continue
            if is_repo:
                self.found.append(RepoIdentity.discovered(current))
                continue
            stack.extend(reversed(self._children(current)))

    def _children(self, directory: Path) -> list[Path]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            logger.debug("Skipping unreadable directory %s: %s", directory, e)
            return []

        children: list[Path] = []
        for entry in entries:
            if entry.name == GIT_MARKER:
                continue
            child = self._accept(entry)
            if child is not None:
                children.append(child)
        return children

    def _accept(self, entry: os.DirEntry[str]) -> Path | None:
        try:
            is_link = entry.is_symlink()
            if not entry.is_dir(follow_symlinks=True):
                return None
        except OSError:
            return None

        if is_link and not self._config.follow_symlinks:
            return None

        child = Path(entry.path)
        if is_ignored(child, self._root, self._config.ignore):
            logger.debug("Ignoring %s", child)
            return None

        if self._config.same_filesystem:
            try:
                device = _device_of(child)
            except OSError as e:
                logger.debug("Skipping %s: %s", child, e)
                return None
            if device != self._root_device:
                logger.debug("Not crossing filesystem boundary at %s", child)
                return None

        if self._config.follow_symlinks:
            try:
                canonical = child.resolve()
            except (OSError, RuntimeError):
                return None
            if canonical in self._visited:
                logger.debug("Already visited %s (via %s)", canonical, child)
                return None
            self._visited.add(canonical)

        return child


def scan(config: DiscoveryConfig) -> Result[tuple[RepoIdentity, ...], ScanError]:
    """Find every repository under config.root.

    Returns:
        Ok(identities sorted by path, without duplicates), or Err(ScanError)
        if the root is missing or not a directory.
    """
    root = config.root.expanduser()
    try:
        root_stat = os.stat(root)
    except OSError as e:
        return Err(ScanError(f"Scan root is not accessible: {root} ({e.strerror or e})", root))
    if not stat.S_ISDIR(root_stat.st_mode):
        return Err(ScanError(f"Scan root is not a directory: {root}", root))

    logger.info("Scanning for git repos under %s; this may take a while...", root)
    walker = _Walker(config, root, _device_of(root))
    walker.run()
    repos = unique_sorted(walker.found)
    logger.info("Found %d repos under %s", len(repos), root)
    return Ok(repos)
