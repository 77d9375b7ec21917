from __future__ import annotations

import io
from pathlib import Path
import sys

import pytest

from fsgate.cli.main import (
    EXIT_ACCESS_DENIED,
    EXIT_ERROR,
    EXIT_OK,
    build_parser,
    main,
)

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="POSIX path semantics."
)


def _run(sandbox: Path, *args: str) -> int:
    return main(["--allowed-dir", str(sandbox), *args])


def test_parser_requires_a_command() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_write_and_read(sandbox: Path, capsys: pytest.CaptureFixture[str]) -> None:
    target = sandbox / "notes.txt"
    assert _run(sandbox, "write", str(target), "--content", "hello") == EXIT_OK
    assert "File written successfully to:" in capsys.readouterr().out

    assert _run(sandbox, "read", str(target)) == EXIT_OK
    assert capsys.readouterr().out == "hello"


def test_write_reads_stdin_by_default(
    sandbox: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("from stdin"))
    assert _run(sandbox, "write", str(sandbox / "in.txt")) == EXIT_OK
    assert (sandbox / "in.txt").read_text(encoding="utf-8") == "from stdin"


def test_ls_and_mkdir(sandbox: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(sandbox, "mkdir", str(sandbox / "docs")) == EXIT_OK
    capsys.readouterr()
    assert _run(sandbox, "ls", str(sandbox)) == EXIT_OK
    assert capsys.readouterr().out.strip() == "[DIR] docs"


def test_search_prints_matches(
    sandbox: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (sandbox / "keep").mkdir()
    (sandbox / "keep" / "a.txt").write_text("a", encoding="utf-8")
    (sandbox / "vendor").mkdir()
    (sandbox / "vendor" / "b.txt").write_text("b", encoding="utf-8")
    code = _run(sandbox, "search", str(sandbox), "*.txt", "--exclude", "vendor")
    assert code == EXIT_OK
    assert capsys.readouterr().out.splitlines() == [str(sandbox / "keep" / "a.txt")]


def test_roots(sandbox: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert _run(sandbox, "roots") == EXIT_OK
    assert capsys.readouterr().out.strip() == str(sandbox)


def test_access_denied_exit_code(
    sandbox: Path, outside: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = _run(sandbox, "read", str(outside / "secret.txt"))
    assert code == EXIT_ACCESS_DENIED
    assert "Access denied" in capsys.readouterr().out


def test_storage_error_exit_code(
    sandbox: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = _run(sandbox, "read", str(sandbox / "missing.txt"))
    assert code == EXIT_ERROR
    assert capsys.readouterr().out.startswith("Error: Failed to read")


def test_environment_allowlist_is_used(
    sandbox: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("ALLOWED_DIRECTORIES", str(sandbox))
    assert main(["roots"]) == EXIT_OK
    assert capsys.readouterr().out.strip() == str(sandbox)
