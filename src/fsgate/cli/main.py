from __future__ import annotations

import argparse
import sys

from fsgate import build_file_ops
from fsgate.errors import AccessDeniedError, FsGateError
from fsgate.mcp.tools import format_listing

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ACCESS_DENIED = 2


def _ensure_utf8_stdout() -> None:
    """Reconfigure stdout to UTF-8 when supported.

    File contents are printed as-is; consoles with a legacy code page would
    otherwise raise encoding errors on non-ASCII text.
    """

    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="strict")
    except (AttributeError, ValueError):
        return


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        description="Run one sandboxed file operation (dev CLI for FSGate)."
    )
    parser.add_argument(
        "--allowed-dir",
        action="append",
        default=[],
        help="Allowed directory (repeatable). Defaults to $ALLOWED_DIRECTORIES.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    read = sub.add_parser("read", help="Print a file's contents.")
    read.add_argument("path")

    write = sub.add_parser("write", help="Write text to a file (stdin by default).")
    write.add_argument("path")
    write.add_argument("--content", help="Text to write instead of reading stdin.")

    ls = sub.add_parser("ls", help="List a directory.")
    ls.add_argument("path")

    mkdir = sub.add_parser("mkdir", help="Create a directory.")
    mkdir.add_argument("path")

    search = sub.add_parser("search", help="Recursively search by name glob.")
    search.add_argument("path")
    search.add_argument("pattern")
    search.add_argument(
        "--exclude",
        action="append",
        default=[],
        help="Exclusion glob (repeatable); bare names match at any depth.",
    )

    sub.add_parser("roots", help="Print the allowed directories.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the CLI entrypoint.

    Args:
        argv: Optional argument list for testing.

    Returns:
        Exit code (0 success, 1 storage/config failure, 2 access denied).
    """
    _ensure_utf8_stdout()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        ops = build_file_ops(args.allowed_dir or None)
        if args.command == "read":
            sys.stdout.write(ops.read_text(args.path))
        elif args.command == "write":
            content = args.content if args.content is not None else sys.stdin.read()
            written = ops.write_text(args.path, content)
            print(f"File written successfully to: {written}", flush=True)
        elif args.command == "ls":
            print(format_listing(ops.list_directory(args.path)), flush=True)
        elif args.command == "mkdir":
            created = ops.create_directory(args.path)
            print(f"Directory created: {created}", flush=True)
        elif args.command == "search":
            result = ops.search(args.path, args.pattern, args.exclude)
            for match in result.matches:
                print(match, flush=True)
        else:
            for directory in ops.guard.roots.directories:
                print(directory, flush=True)
        return EXIT_OK
    except AccessDeniedError as e:
        print(f"Error: {e}", flush=True)
        return EXIT_ACCESS_DENIED
    except FsGateError as e:
        print(f"Error: {e}", flush=True)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
