from __future__ import annotations

from collections.abc import Mapping
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError
from .guard import AllowedRoots

ALLOWED_DIRECTORIES_ENV = "ALLOWED_DIRECTORIES"
DEBUG_ENV = "DEBUG"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class GatewayConfig(BaseModel):
    """Startup configuration shared by the MCP server and the CLI."""

    allowed_directories: list[str] = Field(
        default_factory=list,
        description="Allowed directories; empty means use the defaults.",
    )
    log_level: str = Field(default="INFO", description="Logging level.")
    log_file: Path | None = Field(default=None, description="Optional log file path.")

    def build_roots(self) -> AllowedRoots:
        """Build the immutable allowlist for this configuration.

        Returns:
            AllowedRoots from ``allowed_directories`` or the defaults.

        Raises:
            ConfigError: If the configured list yields no usable directory.
        """
        if not self.allowed_directories:
            return AllowedRoots.default()
        try:
            return AllowedRoots.from_entries(self.allowed_directories)
        except ValidationError as exc:
            raise ConfigError(
                f"Invalid allowed directories {self.allowed_directories!r}: {exc}"
            ) from exc


def parse_allowed_directories(value: str | None) -> list[str]:
    """Split a comma-separated directory list, dropping blank entries.

    Args:
        value: Raw environment value.

    Returns:
        Directory entries in order.
    """
    if not value:
        return []
    return [entry.strip() for entry in value.split(",") if entry.strip()]


def is_debug_enabled(environ: Mapping[str, str] | None = None) -> bool:
    """Return True when ``DEBUG=true`` is set."""
    env = os.environ if environ is None else environ
    return env.get(DEBUG_ENV, "").strip().lower() == "true"


def load_config(
    *,
    allowed_directories: list[str] | None = None,
    log_level: str | None = None,
    log_file: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> GatewayConfig:
    """Resolve configuration from explicit values, then the environment.

    Args:
        allowed_directories: Directories given on the command line.
        log_level: Log level given on the command line.
        log_file: Optional log file path.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Resolved configuration.

    Raises:
        ConfigError: If the log level is unknown.
    """
    env = os.environ if environ is None else environ
    directories = list(allowed_directories or [])
    if not directories:
        directories = parse_allowed_directories(env.get(ALLOWED_DIRECTORIES_ENV))

    level = (log_level or "INFO").upper()
    if is_debug_enabled(env):
        level = "DEBUG"
    if level not in _LOG_LEVELS:
        raise ConfigError(f"Unknown log level: {log_level}")

    return GatewayConfig(
        allowed_directories=directories, log_level=level, log_file=log_file
    )


def configure_logging(config: GatewayConfig) -> None:
    """Configure process logging on stderr (and optionally a file).

    Args:
        config: Gateway configuration.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if config.log_file is not None:
        handlers.append(logging.FileHandler(config.log_file))
    logging.basicConfig(
        level=config.log_level.upper(),
        handlers=handlers,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
