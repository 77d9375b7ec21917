from __future__ import annotations

from pathlib import Path
import sys

import pytest

from fsgate.errors import AccessDeniedError, StorageError
from fsgate.mcp import tools
from fsgate.ops import DirectoryEntry, FileOps, SearchResult

pytestmark = pytest.mark.skipif(
    sys.platform == "win32", reason="POSIX path semantics."
)


def test_run_write_then_read_file_tool(ops: FileOps, sandbox: Path) -> None:
    target = str(sandbox / "notes.txt")
    written = tools.run_write_file_tool(
        tools.WriteFileToolInput(path=target, content="hello"), ops=ops
    )
    assert written.message == f"File written successfully to: {target}"

    read = tools.run_read_file_tool(tools.ReadFileToolInput(path=target), ops=ops)
    assert read == tools.ReadFileToolOutput(path=target, content="hello")


def test_run_list_directory_tool_formats_listing(
    ops: FileOps, sandbox: Path
) -> None:
    (sandbox / "b").mkdir()
    result = tools.run_list_directory_tool(
        tools.ListDirectoryToolInput(path=str(sandbox)), ops=ops
    )
    assert result.entries == [DirectoryEntry(name="b", is_directory=True)]
    assert result.listing == "[DIR] b"


def test_format_listing() -> None:
    entries = [
        DirectoryEntry(name="a.txt", is_directory=False),
        DirectoryEntry(name="b", is_directory=True),
    ]
    assert tools.format_listing(entries) == "[FILE] a.txt\n[DIR] b"
    assert tools.format_listing([]) == ""


def test_run_create_directory_tool(ops: FileOps, sandbox: Path) -> None:
    target = str(sandbox / "made")
    result = tools.run_create_directory_tool(
        tools.CreateDirectoryToolInput(path=target), ops=ops
    )
    assert result.message == f"Directory created: {target}"
    assert (sandbox / "made").is_dir()


def test_run_search_files_tool_passes_exclusions(
    monkeypatch: pytest.MonkeyPatch, ops: FileOps
) -> None:
    captured: dict[str, object] = {}

    def _fake_search(
        root: str, pattern: str, exclude_patterns: list[str] | None = None
    ) -> SearchResult:
        captured["args"] = (root, pattern, exclude_patterns)
        return SearchResult(matches=["/data/a.txt"])

    monkeypatch.setattr(ops, "search", _fake_search)
    payload = tools.SearchFilesToolInput(
        path="/data", pattern="*.txt", exclude_patterns=["node_modules"]
    )
    result = tools.run_search_files_tool(payload, ops=ops)
    assert captured["args"] == ("/data", "*.txt", ["node_modules"])
    assert result.matches == ["/data/a.txt"]
    assert result.skipped == []


def test_run_list_allowed_directories_tool(ops: FileOps, sandbox: Path) -> None:
    result = tools.run_list_allowed_directories_tool(ops=ops)
    assert result.directories == [str(sandbox)]


def test_tool_errors_keep_their_kind(
    ops: FileOps, sandbox: Path, outside: Path
) -> None:
    with pytest.raises(AccessDeniedError):
        tools.run_read_file_tool(
            tools.ReadFileToolInput(path=str(outside / "x.txt")), ops=ops
        )
    with pytest.raises(StorageError):
        tools.run_read_file_tool(
            tools.ReadFileToolInput(path=str(sandbox / "missing.txt")), ops=ops
        )


def test_search_input_defaults_to_no_exclusions() -> None:
    payload = tools.SearchFilesToolInput(path="/data", pattern="*")
    assert payload.exclude_patterns == []
