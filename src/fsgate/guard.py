from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from .errors import AccessDeniedError

logger = logging.getLogger(__name__)


class DenialReason(str, Enum):
    """Reason codes for rejected paths."""

    OUTSIDE_ALLOWLIST = "outside_allowlist"
    SYMLINK_ESCAPES_ALLOWLIST = "symlink_escapes_allowlist"
    PARENT_MISSING = "parent_missing"


@dataclass(frozen=True)
class Authorized:
    """A path proven to lie under one of the allowed roots.

    Attributes:
        path: Absolute path to operate on. Symlink-resolved when the target
            exists; otherwise the normalized absolute path of the new entry,
            or the link target when the path is a dangling symlink.
    """

    path: Path


@dataclass(frozen=True)
class Denied:
    """A rejected path.

    Attributes:
        reason: Denial reason code.
        path: Absolute, normalized form of the rejected path.
        message: Human-readable message naming the path and the allowlist.
    """

    reason: DenialReason
    path: str
    message: str


AuthorizationResult = Authorized | Denied


def normalize_path(path: str) -> str:
    """Collapse ``.``/``..`` segments and redundant separators.

    Args:
        path: Path string.

    Returns:
        Normalized path string. No filesystem access.
    """
    return os.path.normpath(path)


def expand_home(path: str, home: str | None = None) -> str:
    """Replace a leading ``~`` with the user's home directory.

    Only ``~`` on its own or ``~/...`` is expanded; ``~user`` forms are
    returned unchanged.

    Args:
        path: Path string.
        home: Home directory override. Defaults to ``Path.home()``.

    Returns:
        Expanded path string.
    """
    if path == "~" or path.startswith("~/"):
        base = home if home is not None else str(Path.home())
        return os.path.join(base, path[2:]) if len(path) > 2 else base
    return path


def to_absolute(path: str) -> str:
    """Expand ``~`` and resolve against the current working directory.

    Args:
        path: Caller-supplied path string.

    Returns:
        Normalized absolute path string (symlinks are not resolved).
    """
    expanded = expand_home(path)
    if not os.path.isabs(expanded):
        expanded = os.path.join(os.getcwd(), expanded)
    return normalize_path(expanded)


def is_within(path: str, root: str) -> bool:
    """Return True when ``path`` equals ``root`` or is nested below it.

    Containment is checked per path segment, so ``/home/user2`` is not
    inside ``/home/user``.

    Args:
        path: Normalized absolute path.
        root: Normalized absolute root directory.

    Returns:
        True if contained.
    """
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


class AllowedRoots(BaseModel):
    """Ordered, immutable set of directories that bound every file operation."""

    model_config = ConfigDict(frozen=True)

    directories: tuple[str, ...] = Field(
        ..., description="Absolute, normalized allowed directories."
    )
    _real_directories: tuple[str, ...] = PrivateAttr(default=())

    @field_validator("directories", mode="before")
    @classmethod
    def _normalize_directories(cls, value: object) -> tuple[str, ...]:
        """Absolutize, normalize and de-duplicate entries in order."""
        if isinstance(value, (str, Path)):
            value = [value]
        seen: dict[str, None] = {}
        for entry in value:  # type: ignore[union-attr]
            raw = str(entry).strip()
            if not raw:
                continue
            seen.setdefault(to_absolute(raw), None)
        if not seen:
            raise ValueError("At least one allowed directory is required.")
        return tuple(seen)

    @classmethod
    def from_entries(cls, entries: list[str] | tuple[str, ...]) -> AllowedRoots:
        """Build roots from raw entries (``~`` and relative paths allowed).

        Args:
            entries: Directory entries.

        Returns:
            AllowedRoots instance.
        """
        return cls(directories=tuple(entries))

    @classmethod
    def default(cls) -> AllowedRoots:
        """Return the fallback allowlist: home directory, then working directory."""
        return cls(directories=(str(Path.home()), os.getcwd()))

    def model_post_init(self, __context: Any) -> None:
        resolved: dict[str, None] = dict.fromkeys(self.directories)
        for root in self.directories:
            resolved.setdefault(os.path.realpath(root), None)
        self._real_directories = tuple(resolved)

    @property
    def real_directories(self) -> tuple[str, ...]:
        """Configured roots followed by their distinct real paths."""
        return self._real_directories

    def contains(self, path: str) -> bool:
        """Return True if a normalized absolute path lies under any root.

        Both the configured roots and their real paths (resolved once, at
        construction) are accepted, so a root reached through a symlink
        still admits the files inside it.
        """
        return any(is_within(path, root) for root in self._real_directories)

    def describe(self) -> str:
        """Return the allowlist as a comma-separated string."""
        return ", ".join(self.directories)


class PathGuard:
    """Authorize caller-supplied paths against a fixed set of allowed roots."""

    def __init__(self, roots: AllowedRoots) -> None:
        self._roots = roots

    @property
    def roots(self) -> AllowedRoots:
        """Allowed roots this guard enforces."""
        return self._roots

    def authorize(self, raw_path: str | Path) -> AuthorizationResult:
        """Decide whether a path may be operated on.

        Args:
            raw_path: Caller-supplied path (``~``, relative and ``..`` allowed).

        Returns:
            ``Authorized`` with the canonical path, or ``Denied`` with a reason.
        """
        absolute = to_absolute(str(raw_path))
        allowlist = self._roots.describe()

        if not self._roots.contains(absolute):
            return self._deny(
                DenialReason.OUTSIDE_ALLOWLIST,
                absolute,
                "Access denied - path outside allowed directories: "
                f"{absolute} not in {allowlist}",
            )

        try:
            real = str(Path(absolute).resolve(strict=True))
        except (OSError, RuntimeError):
            return self._authorize_missing(absolute, allowlist)

        if not self._roots.contains(real):
            return self._deny(
                DenialReason.SYMLINK_ESCAPES_ALLOWLIST,
                absolute,
                "Access denied - symlink target outside allowed directories: "
                f"{absolute} -> {real} not in {allowlist}",
            )
        return Authorized(path=Path(real))

    def ensure_allowed(self, raw_path: str | Path) -> Path:
        """Authorize a path or raise.

        Args:
            raw_path: Caller-supplied path.

        Returns:
            Canonical path to operate on.

        Raises:
            AccessDeniedError: If the path is rejected.
        """
        result = self.authorize(raw_path)
        if isinstance(result, Denied):
            raise AccessDeniedError(result)
        return result.path

    def _authorize_missing(self, absolute: str, allowlist: str) -> AuthorizationResult:
        """Authorize a path that does not resolve, by checking its parent.

        A dangling symlink stands for its missing target, so the target's
        parent is checked and the target is what gets authorized.
        """
        candidate = absolute
        if os.path.islink(absolute):
            candidate = os.path.realpath(absolute)
            if not self._roots.contains(candidate):
                return self._deny(
                    DenialReason.SYMLINK_ESCAPES_ALLOWLIST,
                    absolute,
                    "Access denied - symlink target outside allowed directories: "
                    f"{absolute} -> {candidate} not in {allowlist}",
                )

        parent = os.path.dirname(candidate)
        try:
            real_parent = str(Path(parent).resolve(strict=True))
        except (OSError, RuntimeError):
            return self._deny(
                DenialReason.PARENT_MISSING,
                absolute,
                f"Parent directory does not exist: {parent}",
            )
        if not self._roots.contains(real_parent):
            return self._deny(
                DenialReason.OUTSIDE_ALLOWLIST,
                absolute,
                "Access denied - parent directory outside allowed directories: "
                f"{real_parent} not in {allowlist}",
            )
        return Authorized(path=Path(candidate))

    def _deny(self, reason: DenialReason, path: str, message: str) -> Denied:
        logger.debug("Denied %s (%s)", path, reason.value)
        return Denied(reason=reason, path=path, message=message)
