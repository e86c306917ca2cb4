"""Core domain types and logic."""

from .config import Config, ConfigError, DiscoveryConfig, load_config
from .errors import ErrorCode
from .repo import RepoIdentity
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "DiscoveryConfig",
    "load_config",
    # errors
    "ErrorCode",
    # repo
    "RepoIdentity",
    # result
    "Err",
    "Ok",
    "Result",
]
