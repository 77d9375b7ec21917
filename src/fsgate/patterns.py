from __future__ import annotations

from collections.abc import Callable, Iterable
import logging
import re
from typing import Protocol, TypeVar

from wcmatch import fnmatch, glob

from .errors import InvalidPatternError

logger = logging.getLogger(__name__)

NAME_FLAGS = fnmatch.IGNORECASE | fnmatch.BRACE | fnmatch.DOTMATCH
EXCLUDE_FLAGS = (
    glob.GLOBSTAR | glob.BRACE | glob.DOTGLOB | glob.CASE | glob.FORCEUNIX
)

_T = TypeVar("_T")


class _Matcher(Protocol):
    def match(self, filename: str) -> bool: ...


def exclusion_globs(pattern: str) -> list[str]:
    """Expand an exclusion pattern into the globs it stands for.

    Patterns containing ``*`` are used as given. Anything else, such as
    ``node_modules``, excludes that name at any depth together with
    everything below it.

    Args:
        pattern: Exclusion pattern.

    Returns:
        Glob patterns.
    """
    if "*" in pattern:
        return [pattern]
    name = pattern.strip("/")
    return [f"**/{name}", f"**/{name}/**"]


def _compile(pattern: str, build: Callable[[], _T]) -> _T:
    try:
        return build()
    except (re.error, ValueError) as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc


def _compile_exclusion(raw: str) -> _Matcher:
    return _compile(
        raw, lambda: glob.compile(exclusion_globs(raw), flags=EXCLUDE_FLAGS)
    )


class SearchMatcher:
    """Compiled name pattern and exclusion globs for one search.

    Names are matched case-insensitively against the entry name only.
    Exclusions are matched case-sensitively against ``/``-separated paths
    relative to the search root. Leading dots get no special treatment in
    either.
    """

    def __init__(self, pattern: str, exclude_patterns: Iterable[str] = ()) -> None:
        """Compile the patterns.

        Args:
            pattern: Glob matched against entry names.
            exclude_patterns: Exclusion patterns.

        Raises:
            InvalidPatternError: If a pattern cannot be compiled.
        """
        self._name: _Matcher = _compile(
            pattern, lambda: fnmatch.compile(pattern, flags=NAME_FLAGS)
        )
        self._excludes = [_compile_exclusion(raw) for raw in exclude_patterns]
        logger.debug(
            "Compiled search pattern %r with %d exclusions",
            pattern,
            len(self._excludes),
        )

    def matches_name(self, name: str) -> bool:
        """Return True if an entry name matches the search pattern."""
        return bool(self._name.match(name))

    def is_excluded(self, relative_path: str) -> bool:
        """Return True if a root-relative path matches any exclusion.

        Args:
            relative_path: Path relative to the search root, ``/``-separated.

        Returns:
            True if excluded.
        """
        return any(matcher.match(relative_path) for matcher in self._excludes)
