"""Repository discovery and the repository cache."""

from gg.discovery.cache import CacheRecord, RepoCache
from gg.discovery.scanner import ScanError, is_ignored, scan

__all__ = [
    "CacheRecord",
    "RepoCache",
    "ScanError",
    "is_ignored",
    "scan",
]
