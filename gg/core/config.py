"""Typed configuration loading and access.

The config file is TOML with a single ``[global]`` table:

    [global]
    scan_root = "~/src"
    ignore = [".cargo", "node_modules"]
    follow_symlinks = false
    same_filesystem = true
    default_cmd = "status"
    show_untracked = true

Every key is optional. A missing file means "all defaults".
"""

from __future__ import annotations

import hashlib
import json
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from gg.platform.files import atomic_write_text
from gg.platform.paths import home, user_cache_dir

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "CACHE_FILENAME",
    "Config",
    "ConfigError",
    "DEFAULT_CMD",
    "DEFAULT_IGNORED_PATTERNS",
    "DiscoveryConfig",
    "load_config",
    "save_config",
]

CACHE_FILENAME = "repos.json"
DEFAULT_CMD = "status"
DEFAULT_IGNORED_PATTERNS: tuple[str, ...] = (".cargo",)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded, parsed or written."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class DiscoveryConfig:
    """Everything that decides which repositories a scan finds.

    Attributes:
        root: Directory the scan starts from.
        follow_symlinks: Enter symlinked directories (with a cycle guard).
        same_filesystem: Do not cross into other mounted filesystems.
        ignore: Glob patterns; matching directories are skipped entirely.
    """

    root: Path
    follow_symlinks: bool = False
    same_filesystem: bool = True
    ignore: tuple[str, ...] = DEFAULT_IGNORED_PATTERNS

    def fingerprint(self) -> str:
        """Stable hash of these settings, used as the cache invalidation key.

        Any field change yields a different fingerprint. Pattern order is
        kept, since the config file lists patterns in a user-chosen order.
        """
        payload = json.dumps(
            {
                "root": str(self.root),
                "follow_symlinks": self.follow_symlinks,
                "same_filesystem": self.same_filesystem,
                "ignore": list(self.ignore),
            },
            sort_keys=True,
            separators=(",", ":"),
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _default_discovery() -> DiscoveryConfig:
    return DiscoveryConfig(root=home())


def _default_cache_path() -> Path:
    return user_cache_dir() / CACHE_FILENAME


@dataclass(frozen=True, slots=True)
class Config:
    """Fully resolved settings for one invocation.

    Built once at startup and never re-read while a command runs.
    """

    discovery: DiscoveryConfig = field(default_factory=_default_discovery)
    default_cmd: str = DEFAULT_CMD
    show_untracked: bool = True
    json_output: bool = False
    verbose: bool = False
    cache_path: Path = field(default_factory=_default_cache_path)
    config_path: Path | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, config_path: Path | None = None) -> Config:
        """Create Config from parsed TOML.

        Raises:
            ValueError: If a known key has the wrong type.
        """
        table: StrDict = get_table(data, "global") or {}
        _check_types(table)

        scan_root = get_str(table, "scan_root")
        ignore = get_str_list(table, "ignore")
        follow = get_bool(table, "follow_symlinks")
        same_fs = get_bool(table, "same_filesystem")
        untracked = get_bool(table, "show_untracked")

        discovery = DiscoveryConfig(
            root=Path(scan_root).expanduser() if scan_root else home(),
            follow_symlinks=follow if follow is not None else False,
            same_filesystem=same_fs if same_fs is not None else True,
            ignore=tuple(p.strip() for p in ignore if p.strip())
            if ignore is not None
            else DEFAULT_IGNORED_PATTERNS,
        )
        return cls(
            discovery=discovery,
            default_cmd=get_str(table, "default_cmd") or DEFAULT_CMD,
            show_untracked=untracked if untracked is not None else True,
            config_path=config_path,
        )

    def with_ignored(self, pattern: str) -> Config:
        """Return a copy with pattern appended to the ignore list (no duplicates)."""
        if pattern in self.discovery.ignore:
            return self
        discovery = replace(self.discovery, ignore=(*self.discovery.ignore, pattern))
        return replace(self, discovery=discovery)

    def to_toml(self) -> str:
        """Render the persistent part of the config as TOML."""
        ignore = ", ".join(_toml_str(p) for p in self.discovery.ignore)
        lines = [
            "[global]",
            f"scan_root = {_toml_str(self.discovery.root.as_posix())}",
            f"ignore = [{ignore}]",
            f"follow_symlinks = {_toml_bool(self.discovery.follow_symlinks)}",
            f"same_filesystem = {_toml_bool(self.discovery.same_filesystem)}",
            f"default_cmd = {_toml_str(self.default_cmd)}",
            f"show_untracked = {_toml_bool(self.show_untracked)}",
        ]
        return "\n".join(lines) + "\n"


_EXPECTED_TYPES: dict[str, type] = {
    "scan_root": str,
    "ignore": list,
    "follow_symlinks": bool,
    "same_filesystem": bool,
    "default_cmd": str,
    "show_untracked": bool,
}


def _check_types(table: StrDict) -> None:
    for key, expected in _EXPECTED_TYPES.items():
        if key not in table:
            continue
        if not isinstance(table[key], expected):
            raise ValueError(f"global.{key} must be a {expected.__name__}")
    if "ignore" in table and get_str_list(table, "ignore") is None:
        raise ValueError("global.ignore must be a list of strings")


def _toml_str(value: str) -> str:
    # JSON string escapes are a subset of TOML basic-string escapes.
    return json.dumps(value, ensure_ascii=False)


def _toml_bool(value: bool) -> str:
    return "true" if value else "false"


def _parse_toml(path: Path) -> Result[StrDict | None, ConfigError]:
    """Parse a TOML file. A missing file is Ok(None)."""
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        return Ok(None)
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except OSError as e:
        return Err(ConfigError(f"Error reading {path}: {e}", path=path))

    try:
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Invalid UTF-8 in config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load configuration from a TOML file.

    Args:
        path: Path to config.toml (need not exist)

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    if result.value is None:
        return Ok(Config(config_path=path))

    try:
        return Ok(Config.from_dict(result.value, config_path=path))
    except (TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def save_config(config: Config, path: Path) -> Result[None, ConfigError]:
    """Write the persistent settings of config to path atomically."""
    try:
        atomic_write_text(path, config.to_toml())
    except OSError as e:
        return Err(ConfigError(f"Could not write {path}: {e}", path=path))
    return Ok(None)
