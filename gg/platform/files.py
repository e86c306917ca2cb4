"""Filesystem helpers for the config and cache files."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

__all__ = ["atomic_write_json", "atomic_write_text", "read_text_or_none"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Replace path with content so readers see either the old or the new file.

    The data goes to a sibling temp file which is fsynced and then moved over
    the target with os.replace. On any failure the temp file is removed, the
    original file is left as it was, and the OSError propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


def atomic_write_json(path: Path, data: object) -> None:
    """Serialize data as indented JSON and write it with atomic_write_text."""
    atomic_write_text(path, json.dumps(data, indent=2) + "\n")


def read_text_or_none(path: Path, *, encoding: str = "utf-8") -> str | None:
    """Return the file content, or None if it is missing or unreadable."""
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError):
        return None
