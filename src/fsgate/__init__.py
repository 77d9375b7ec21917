from __future__ import annotations

import logging

from .config import GatewayConfig, load_config
from .errors import (
    AccessDeniedError,
    ConfigError,
    FsGateError,
    InvalidPatternError,
    StorageError,
)
from .guard import (
    AllowedRoots,
    Authorized,
    AuthorizationResult,
    Denied,
    DenialReason,
    PathGuard,
    expand_home,
    normalize_path,
)
from .ops import DirectoryEntry, FileOps, SearchResult, SkippedEntry

logger = logging.getLogger(__name__)

__all__ = [
    "AccessDeniedError",
    "AllowedRoots",
    "AuthorizationResult",
    "Authorized",
    "ConfigError",
    "Denied",
    "DenialReason",
    "DirectoryEntry",
    "FileOps",
    "FsGateError",
    "GatewayConfig",
    "InvalidPatternError",
    "PathGuard",
    "SearchResult",
    "SkippedEntry",
    "StorageError",
    "build_file_ops",
    "expand_home",
    "load_config",
    "normalize_path",
]


def build_file_ops(allowed_directories: list[str] | None = None) -> FileOps:
    """Create guarded file operations from explicit directories or the environment.

    Args:
        allowed_directories: Allowed directories. When omitted, the
            ``ALLOWED_DIRECTORIES`` environment variable is used, then the
            home and current working directories.

    Returns:
        FileOps bound to a PathGuard over the resolved allowlist.
    """
    config = load_config(allowed_directories=allowed_directories)
    roots = config.build_roots()
    logger.debug("Allowed directories: %s", roots.describe())
    return FileOps(PathGuard(roots))
