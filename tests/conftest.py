from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
import sys
import tempfile

import pytest

from fsgate.guard import AllowedRoots, PathGuard
from fsgate.ops import FileOps

IS_WINDOWS = sys.platform == "win32"
IS_ROOT = hasattr(os, "geteuid") and os.geteuid() == 0


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers to avoid pytest warnings."""
    config.addinivalue_line(
        "markers", "symlink: requires the ability to create symbolic links."
    )
    config.addinivalue_line(
        "markers", "posix_perms: requires POSIX permission bits enforced (non-root)."
    )


@lru_cache(maxsize=1)
def _can_symlink() -> bool:
    """Return True if the current user can create symbolic links."""
    with tempfile.TemporaryDirectory() as tmp:
        target = Path(tmp) / "target"
        target.write_text("x", encoding="utf-8")
        try:
            (Path(tmp) / "link").symlink_to(target)
        except (OSError, NotImplementedError):
            return False
    return True


def pytest_runtest_setup(item: pytest.Item) -> None:
    """Skip tests based on resource markers and environment availability."""
    if "symlink" in item.keywords and not _can_symlink():
        pytest.skip("Symbolic links cannot be created here.")
    if "posix_perms" in item.keywords and (IS_WINDOWS or IS_ROOT):
        pytest.skip("POSIX permission bits are not enforced for this user.")


@pytest.fixture
def sandbox(tmp_path: Path) -> Path:
    """Allowed root directory (symlink-free) inside the test temp dir."""
    root = tmp_path / "sandbox"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def outside(tmp_path: Path) -> Path:
    """Directory next to the sandbox that is not allowed."""
    path = tmp_path / "outside"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def guard(sandbox: Path) -> PathGuard:
    """PathGuard allowing only the sandbox."""
    return PathGuard(AllowedRoots.from_entries([str(sandbox)]))


@pytest.fixture
def ops(guard: PathGuard) -> FileOps:
    """FileOps bound to the sandbox guard."""
    return FileOps(guard)
