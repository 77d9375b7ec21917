from __future__ import annotations

from collections.abc import Iterator
import contextlib
import logging
import os
from pathlib import Path
import shutil
import uuid

from pydantic import BaseModel, Field

from .errors import AccessDeniedError, StorageError
from .guard import Denied, PathGuard
from .logging_utils import log_skip
from .patterns import SearchMatcher

logger = logging.getLogger(__name__)


class DirectoryEntry(BaseModel):
    """Immediate child of a listed directory."""

    name: str = Field(..., description="Entry name.")
    is_directory: bool = Field(
        ..., description="True for directories (links are not followed)."
    )


class SkippedEntry(BaseModel):
    """Entry left out of a search, with the reason."""

    path: str
    reason: str = Field(..., description="Denial reason code or 'storage_error'.")
    detail: str = ""


class SearchResult(BaseModel):
    """Outcome of a recursive search."""

    matches: list[str] = Field(
        default_factory=list, description="Matching absolute paths."
    )
    skipped: list[SkippedEntry] = Field(default_factory=list)


class FileOps:
    """Filesystem operations gated by a PathGuard.

    Every operation authorizes its path before touching storage. Policy
    rejections raise ``AccessDeniedError``; filesystem failures raise
    ``StorageError``.
    """

    def __init__(self, guard: PathGuard) -> None:
        self._guard = guard

    @property
    def guard(self) -> PathGuard:
        """Guard used to authorize paths."""
        return self._guard

    def read_text(self, path: str | Path) -> str:
        """Read a whole file as UTF-8 text.

        Args:
            path: File path.

        Returns:
            File contents, line endings untouched.

        Raises:
            AccessDeniedError: If the path is not authorized.
            StorageError: If the file cannot be read or decoded.
        """
        target = self._authorize(path)
        try:
            with target.open("r", encoding="utf-8", newline="") as handle:
                content = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError("read", str(target), str(exc)) from exc
        logger.debug("Read %d characters from %s", len(content), target)
        return content

    def write_text(self, path: str | Path, content: str) -> Path:
        """Create or replace a file with UTF-8 text.

        The content is written to a temporary sibling and moved over the
        target, so a failed write leaves any previous content in place.

        Args:
            path: File path.
            content: Text to write.

        Returns:
            Path that was written.

        Raises:
            AccessDeniedError: If the path is not authorized.
            StorageError: If the file cannot be written.
        """
        target = self._authorize(path)
        tmp_name = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
        try:
            # 0o666 lets the process umask decide a new file's permissions
            fd = os.open(tmp_name, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o666)
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
                    handle.write(content)
                if target.exists():
                    shutil.copymode(target, tmp_name)
                os.replace(tmp_name, target)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StorageError("write", str(target), str(exc)) from exc
        logger.debug("Wrote %d characters to %s", len(content), target)
        return target

    def list_directory(self, path: str | Path) -> list[DirectoryEntry]:
        """List the immediate children of a directory.

        Entries come back in the order the filesystem enumerates them.

        Args:
            path: Directory path.

        Returns:
            Directory entries.

        Raises:
            AccessDeniedError: If the path is not authorized.
            StorageError: If the directory cannot be read.
        """
        target = self._authorize(path)
        try:
            with os.scandir(target) as it:
                entries = [
                    DirectoryEntry(
                        name=entry.name,
                        is_directory=entry.is_dir(follow_symlinks=False),
                    )
                    for entry in it
                ]
        except OSError as exc:
            raise StorageError("list", str(target), str(exc)) from exc
        logger.debug("Listed %d entries in %s", len(entries), target)
        return entries

    def create_directory(self, path: str | Path) -> Path:
        """Create a directory; no-op if it already exists.

        Raises:
            AccessDeniedError: If the path is not authorized.
            StorageError: If the directory cannot be created.
        """
        target = self._authorize(path)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError("create directory", str(target), str(exc)) from exc
        logger.debug("Created directory %s", target)
        return target

    def search(
        self,
        root: str | Path,
        pattern: str,
        exclude_patterns: list[str] | None = None,
    ) -> SearchResult:
        """Recursively find entries whose name matches a glob.

        Each visited entry is authorized on its own before it is matched or
        descended into. Entries that fail authorization or cannot be read are
        recorded in ``skipped`` and the walk continues. Symlinked directories
        are not descended into.

        Args:
            root: Directory to search from.
            pattern: Case-insensitive glob matched against entry names.
            exclude_patterns: Globs matched against root-relative paths. A
                pattern without ``*`` excludes that name at any depth.

        Returns:
            Matches and skipped entries.

        Raises:
            AccessDeniedError: If the root is not authorized.
            InvalidPatternError: If a pattern cannot be compiled.
            StorageError: If the root directory cannot be read.
        """
        base = self._authorize(root)
        matcher = SearchMatcher(pattern, exclude_patterns or [])
        result = SearchResult()
        try:
            root_entries = self._scan(base)
        except OSError as exc:
            raise StorageError("search", str(base), str(exc)) from exc

        stack: list[Iterator[os.DirEntry[str]]] = [iter(root_entries)]
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue
            decision = self._guard.authorize(entry.path)
            if isinstance(decision, Denied):
                self._skip(result, entry.path, decision.reason.value, decision.message)
                continue

            relative = os.path.relpath(entry.path, base).replace(os.sep, "/")
            if matcher.is_excluded(relative):
                continue
            if matcher.matches_name(entry.name):
                result.matches.append(entry.path)

            try:
                descend = entry.is_dir(follow_symlinks=False)
                children = self._scan(Path(entry.path)) if descend else []
            except OSError as exc:
                self._skip(result, entry.path, "storage_error", str(exc))
                continue
            if children:
                stack.append(iter(children))

        logger.debug(
            "Search %r under %s: %d matches, %d skipped",
            pattern,
            base,
            len(result.matches),
            len(result.skipped),
        )
        return result

    def _authorize(self, path: str | Path) -> Path:
        decision = self._guard.authorize(path)
        if isinstance(decision, Denied):
            raise AccessDeniedError(decision)
        return decision.path

    @staticmethod
    def _scan(directory: Path) -> list[os.DirEntry[str]]:
        with os.scandir(directory) as it:
            return list(it)

    @staticmethod
    def _skip(result: SearchResult, path: str, reason: str, detail: str) -> None:
        log_skip(logger, reason, path, detail)
        result.skipped.append(SkippedEntry(path=path, reason=reason, detail=detail))
