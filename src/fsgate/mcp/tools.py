from __future__ import annotations

from pydantic import BaseModel, Field

from fsgate.ops import DirectoryEntry, FileOps, SkippedEntry


class ReadFileToolInput(BaseModel):
    """MCP tool input for reading a file."""

    path: str


class ReadFileToolOutput(BaseModel):
    """MCP tool output for reading a file."""

    path: str
    content: str


class WriteFileToolInput(BaseModel):
    """MCP tool input for writing a file."""

    path: str
    content: str


class WriteFileToolOutput(BaseModel):
    """MCP tool output for writing a file."""

    path: str
    message: str


class ListDirectoryToolInput(BaseModel):
    """MCP tool input for listing a directory."""

    path: str


class ListDirectoryToolOutput(BaseModel):
    """MCP tool output for listing a directory."""

    path: str
    entries: list[DirectoryEntry] = Field(default_factory=list)
    listing: str = Field(
        default="", description="One [DIR] or [FILE] line per entry."
    )


class CreateDirectoryToolInput(BaseModel):
    """MCP tool input for creating a directory."""

    path: str


class CreateDirectoryToolOutput(BaseModel):
    """MCP tool output for creating a directory."""

    path: str
    message: str


class SearchFilesToolInput(BaseModel):
    """MCP tool input for recursive file search."""

    path: str
    pattern: str
    exclude_patterns: list[str] = Field(default_factory=list)


class SearchFilesToolOutput(BaseModel):
    """MCP tool output for recursive file search."""

    matches: list[str] = Field(default_factory=list)
    skipped: list[SkippedEntry] = Field(default_factory=list)


class ListAllowedDirectoriesToolOutput(BaseModel):
    """MCP tool output listing the allowed directories."""

    directories: list[str] = Field(default_factory=list)


def run_read_file_tool(
    payload: ReadFileToolInput, *, ops: FileOps
) -> ReadFileToolOutput:
    """Run the read_file tool handler.

    Args:
        payload: Tool input payload.
        ops: Guarded file operations.

    Returns:
        Tool output payload.
    """
    content = ops.read_text(payload.path)
    return ReadFileToolOutput(path=payload.path, content=content)


def run_write_file_tool(
    payload: WriteFileToolInput, *, ops: FileOps
) -> WriteFileToolOutput:
    """Run the write_file tool handler.

    Args:
        payload: Tool input payload.
        ops: Guarded file operations.

    Returns:
        Tool output payload.
    """
    ops.write_text(payload.path, payload.content)
    return WriteFileToolOutput(
        path=payload.path,
        message=f"File written successfully to: {payload.path}",
    )


def run_list_directory_tool(
    payload: ListDirectoryToolInput, *, ops: FileOps
) -> ListDirectoryToolOutput:
    """Run the list_directory tool handler.

    Args:
        payload: Tool input payload.
        ops: Guarded file operations.

    Returns:
        Tool output payload.
    """
    entries = ops.list_directory(payload.path)
    return ListDirectoryToolOutput(
        path=payload.path, entries=entries, listing=format_listing(entries)
    )


def run_create_directory_tool(
    payload: CreateDirectoryToolInput, *, ops: FileOps
) -> CreateDirectoryToolOutput:
    """Run the create_directory tool handler.

    Args:
        payload: Tool input payload.
        ops: Guarded file operations.

    Returns:
        Tool output payload.
    """
    ops.create_directory(payload.path)
    return CreateDirectoryToolOutput(
        path=payload.path, message=f"Directory created: {payload.path}"
    )


def run_search_files_tool(
    payload: SearchFilesToolInput, *, ops: FileOps
) -> SearchFilesToolOutput:
    """Run the search_files tool handler.

    Args:
        payload: Tool input payload.
        ops: Guarded file operations.

    Returns:
        Tool output payload.
    """
    result = ops.search(payload.path, payload.pattern, payload.exclude_patterns)
    return SearchFilesToolOutput(matches=result.matches, skipped=result.skipped)


def run_list_allowed_directories_tool(
    *, ops: FileOps
) -> ListAllowedDirectoriesToolOutput:
    """Run the list_allowed_directories tool handler."""
    return ListAllowedDirectoriesToolOutput(
        directories=list(ops.guard.roots.directories)
    )


def format_listing(entries: list[DirectoryEntry]) -> str:
    """Render entries as ``[DIR] name`` / ``[FILE] name`` lines.

    Args:
        entries: Directory entries.

    Returns:
        Newline-joined listing.
    """
    return "\n".join(
        f"{'[DIR]' if entry.is_directory else '[FILE]'} {entry.name}"
        for entry in entries
    )
