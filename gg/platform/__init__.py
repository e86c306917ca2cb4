"""Platform abstraction layer."""

from .files import atomic_write_json, atomic_write_text, read_text_or_none
from .paths import (
    default_config_path,
    home,
    user_cache_dir,
    user_config_dir,
)
from .process import ProcessError, run

__all__ = [
    # files
    "atomic_write_json",
    "atomic_write_text",
    "read_text_or_none",
    # paths
    "default_config_path",
    "home",
    "user_cache_dir",
    "user_config_dir",
    # process
    "ProcessError",
    "run",
]
