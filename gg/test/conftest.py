"""Shared fixtures: keep every test away from the real user directories."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from gg.platform import paths


@pytest.fixture(autouse=True)
def isolated_user_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    home = tmp_path / "_home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    monkeypatch.delenv("GIT_GLOBAL_CONFIG", raising=False)
    monkeypatch.delenv("GIT_GLOBAL_CACHE_DIR", raising=False)
    paths.clear_caches()
    yield
    paths.clear_caches()
