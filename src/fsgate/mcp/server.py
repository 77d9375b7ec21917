from __future__ import annotations

import argparse
import functools
import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, cast

import anyio
from pydantic import BaseModel, Field

from fsgate.config import configure_logging, load_config
from fsgate.errors import FsGateError
from fsgate.guard import PathGuard
from fsgate.ops import FileOps

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
    run_create_directory_tool,
    run_list_allowed_directories_tool,
    run_list_directory_tool,
    run_read_file_tool,
    run_search_files_tool,
    run_write_file_tool,
)

if TYPE_CHECKING:  # pragma: no cover - typing only
    from mcp.server.fastmcp import FastMCP

logger = logging.getLogger(__name__)


class ServerConfig(BaseModel):
    """Configuration for the MCP server process."""

    allowed_directories: list[str] = Field(
        default_factory=list, description="Allowed directories (CLI)."
    )
    log_level: str | None = Field(default=None, description="Logging level.")
    log_file: Path | None = Field(default=None, description="Optional log file path.")


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server entrypoint.

    Args:
        argv: Optional CLI arguments for testing.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    config = _parse_args(argv)
    try:
        run_server(config)
    except Exception as exc:  # pragma: no cover - surface runtime errors
        logger.error("MCP server failed: %s", exc)
        return 1
    return 0


def run_server(config: ServerConfig) -> None:
    """Start the MCP server.

    Args:
        config: Server configuration.

    Raises:
        ConfigError: If the allowed directories or log level are invalid.
    """
    gateway = load_config(
        allowed_directories=config.allowed_directories,
        log_level=config.log_level,
        log_file=config.log_file,
    )
    configure_logging(gateway)
    _import_mcp()
    ops = FileOps(PathGuard(gateway.build_roots()))
    logger.info("Allowed directories: %s", ops.guard.roots.describe())
    app = _create_app(ops)
    app.run()


def _parse_args(argv: list[str] | None) -> ServerConfig:
    """Parse CLI arguments into server config.

    Args:
        argv: Optional CLI argument list.

    Returns:
        Parsed server configuration.
    """
    parser = argparse.ArgumentParser(description="FSGate MCP server (stdio).")
    parser.add_argument(
        "--allowed-dir",
        action="append",
        default=[],
        help=(
            "Allowed directory (can be specified multiple times). "
            "Defaults to $ALLOWED_DIRECTORIES, then home and working directory."
        ),
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). DEBUG=true forces DEBUG.",
    )
    parser.add_argument("--log-file", type=Path, help="Optional log file path.")
    args = parser.parse_args(argv)
    return ServerConfig(
        allowed_directories=list(args.allowed_dir),
        log_level=args.log_level,
        log_file=args.log_file,
    )


def _import_mcp() -> ModuleType:
    """Import the MCP SDK module or raise a helpful error.

    Returns:
        Imported MCP module.
    """
    try:
        return importlib.import_module("mcp")
    except ModuleNotFoundError as exc:
        raise RuntimeError(
            "MCP SDK is not installed. Install with `pip install fsgate[mcp]`."
        ) from exc


def _create_app(ops: FileOps) -> FastMCP:
    """Create the MCP FastMCP application.

    Args:
        ops: Guarded file operations.

    Returns:
        FastMCP application instance.
    """
    from mcp.server.fastmcp import FastMCP

    app = FastMCP("FSGate", json_response=True)
    _register_tools(app, ops)
    return app


def _register_tools(app: FastMCP, ops: FileOps) -> None:
    """Register MCP tools for the server.

    Args:
        app: FastMCP application instance.
        ops: Guarded file operations.
    """

    async def _read_file_tool(path: str) -> ReadFileToolOutput:
        """Read the contents of a file.

        Args:
            path: Path to the file to read.

        Returns:
            File content payload.
        """
        payload = ReadFileToolInput(path=path)
        work = functools.partial(run_read_file_tool, payload, ops=ops)
        return cast(ReadFileToolOutput, await _run_guarded("read_file", work))

    app.tool(name="read_file")(_read_file_tool)

    async def _write_file_tool(path: str, content: str) -> WriteFileToolOutput:
        """Write content to a file, creating or replacing it.

        Args:
            path: Path to the file to write.
            content: Content to write to the file.

        Returns:
            Write confirmation payload.
        """
        payload = WriteFileToolInput(path=path, content=content)
        work = functools.partial(run_write_file_tool, payload, ops=ops)
        return cast(WriteFileToolOutput, await _run_guarded("write_file", work))

    app.tool(name="write_file")(_write_file_tool)

    async def _list_directory_tool(path: str) -> ListDirectoryToolOutput:
        """List the contents of a directory.

        Args:
            path: Path to the directory to list.

        Returns:
            Directory listing payload.
        """
        payload = ListDirectoryToolInput(path=path)
        work = functools.partial(run_list_directory_tool, payload, ops=ops)
        return cast(
            ListDirectoryToolOutput, await _run_guarded("list_directory", work)
        )

    app.tool(name="list_directory")(_list_directory_tool)

    async def _create_directory_tool(path: str) -> CreateDirectoryToolOutput:
        """Create a new directory (no error if it already exists).

        Args:
            path: Path to the directory to create.

        Returns:
            Creation confirmation payload.
        """
        payload = CreateDirectoryToolInput(path=path)
        work = functools.partial(run_create_directory_tool, payload, ops=ops)
        return cast(
            CreateDirectoryToolOutput, await _run_guarded("create_directory", work)
        )

    app.tool(name="create_directory")(_create_directory_tool)

    async def _search_files_tool(
        path: str, pattern: str, exclude_patterns: list[str] | None = None
    ) -> SearchFilesToolOutput:
        """Recursively search for files and directories whose name matches a glob.

        Args:
            path: Directory to search from.
            pattern: Case-insensitive glob for entry names (e.g. ``*.txt``).
            exclude_patterns: Globs for paths to skip; bare names such as
                ``node_modules`` are excluded at any depth.

        Returns:
            Matching paths and skipped entries.
        """
        payload = SearchFilesToolInput(
            path=path, pattern=pattern, exclude_patterns=exclude_patterns or []
        )
        work = functools.partial(run_search_files_tool, payload, ops=ops)
        return cast(SearchFilesToolOutput, await _run_guarded("search_files", work))

    app.tool(name="search_files")(_search_files_tool)

    async def _list_allowed_directories_tool() -> ListAllowedDirectoriesToolOutput:
        """List the directories this server is allowed to access.

        Returns:
            Allowed directories payload.
        """
        return run_list_allowed_directories_tool(ops=ops)

    app.tool(name="list_allowed_directories")(_list_allowed_directories_tool)


async def _run_guarded(tool_name: str, work: functools.partial[BaseModel]) -> BaseModel:
    """Run a tool handler in a worker thread, logging gateway failures.

    Args:
        tool_name: Tool name for log messages.
        work: Bound handler call.

    Returns:
        Handler output payload.
    """
    try:
        return await anyio.to_thread.run_sync(work)
    except FsGateError as exc:
        logger.warning("%s failed: %s", tool_name, exc)
        raise
