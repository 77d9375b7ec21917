"""MCP server integration for FSGate."""

from __future__ import annotations

from .tools import (
    CreateDirectoryToolInput,
    CreateDirectoryToolOutput,
    ListAllowedDirectoriesToolOutput,
    ListDirectoryToolInput,
    ListDirectoryToolOutput,
    ReadFileToolInput,
    ReadFileToolOutput,
    SearchFilesToolInput,
    SearchFilesToolOutput,
    WriteFileToolInput,
    WriteFileToolOutput,
    format_listing,
    run_create_directory_tool,
    run_list_allowed_directories_tool,
    run_list_directory_tool,
    run_read_file_tool,
    run_search_files_tool,
    run_write_file_tool,
)

__all__ = [
    "CreateDirectoryToolInput",
    "CreateDirectoryToolOutput",
    "ListAllowedDirectoriesToolOutput",
    "ListDirectoryToolInput",
    "ListDirectoryToolOutput",
    "ReadFileToolInput",
    "ReadFileToolOutput",
    "SearchFilesToolInput",
    "SearchFilesToolOutput",
    "WriteFileToolInput",
    "WriteFileToolOutput",
    "format_listing",
    "run_create_directory_tool",
    "run_list_allowed_directories_tool",
    "run_list_directory_tool",
    "run_read_file_tool",
    "run_search_files_tool",
    "run_write_file_tool",
]
