from __future__ import annotations

import logging


def log_skip(logger: logging.Logger, reason: str, path: str, detail: str) -> None:
    """Log a standardized line for an entry skipped during traversal.

    Args:
        logger: Logger instance to emit the message.
        reason: Short reason code.
        path: Skipped path.
        detail: Human-readable detail message.
    """
    logger.debug("[%s] %s: %s", reason, path, detail)
