from __future__ import annotations

"""Project-specific exception hierarchy for FSGate."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .guard import Denied


class FsGateError(Exception):
    """Base exception for FSGate."""


class ConfigError(FsGateError):
    """Raised when startup configuration (allowed directories, log level) is invalid."""


class AccessDeniedError(FsGateError):
    """Raised when a path fails authorization against the allowed directories.

    Attributes:
        denial: The authorization decision that rejected the path.
    """

    def __init__(self, denial: Denied) -> None:
        super().__init__(denial.message)
        self.denial = denial


class StorageError(FsGateError):
    """Raised when the filesystem call behind an authorized operation fails.

    Attributes:
        operation: Name of the FileOps operation (read/write/list/mkdir/search).
        path: Path the operation was acting on.
    """

    def __init__(self, operation: str, path: str, detail: str) -> None:
        super().__init__(f"Failed to {operation} {path}: {detail}")
        self.operation = operation
        self.path = path


class InvalidPatternError(FsGateError):
    """Raised when a search or exclusion glob cannot be compiled.

    Attributes:
        pattern: The rejected pattern.
    """

    def __init__(self, pattern: str, detail: str) -> None:
        super().__init__(f"Invalid glob pattern {pattern!r}: {detail}")
        self.pattern = pattern
