"""Platform-aware user directories.

Config and cache live in the usual per-user locations:

- config: $XDG_CONFIG_HOME/git-global or ~/.config/git-global
  (%APPDATA%/git-global on Windows)
- cache:  $XDG_CACHE_HOME/git-global or ~/.cache/git-global
  (%LOCALAPPDATA%/git-global/cache on Windows)

Both can be overridden through environment variables, which is how tests
keep away from the real user directories.
"""

from __future__ import annotations

import os
import sys
from functools import lru_cache
from pathlib import Path

__all__ = [
    "APP_NAME",
    "clear_caches",
    "default_config_path",
    "home",
    "user_cache_dir",
    "user_config_dir",
]

APP_NAME = "git-global"

CONFIG_ENV = "GIT_GLOBAL_CONFIG"
CACHE_DIR_ENV = "GIT_GLOBAL_CACHE_DIR"


def is_windows() -> bool:
    return sys.platform == "win32"


@lru_cache(maxsize=1)
def home() -> Path:
    """Get the user's home directory.

    Prefers USERPROFILE on Windows and HOME elsewhere, then falls back to
    Path.home().
    """
    env_name = "USERPROFILE" if is_windows() else "HOME"
    value = os.environ.get(env_name)
    if value:
        return Path(value)
    return Path.home()


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    if is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME
        return home() / "AppData" / "Roaming" / APP_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return home() / ".config" / APP_NAME


@lru_cache(maxsize=1)
def user_cache_dir() -> Path:
    override = os.environ.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()

    if is_windows():
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            return Path(local_app_data) / APP_NAME / "cache"
        return home() / "AppData" / "Local" / APP_NAME / "cache"

    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / APP_NAME
    return home() / ".cache" / APP_NAME


def default_config_path() -> Path:
    """Location of config.toml, honouring GIT_GLOBAL_CONFIG."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return user_config_dir() / "config.toml"


def clear_caches() -> None:
    """Forget memoized paths (for tests that change the environment)."""
    home.cache_clear()
    user_config_dir.cache_clear()
    user_cache_dir.cache_clear()
