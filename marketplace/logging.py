"""
Logging setup for the marketplace cron service.

Importing this module attaches one stdout handler to the root logger.
Cron invocations are short-lived, so there is no file output or rotation.

Usage:
    from marketplace.logging import get_logger
    logger = get_logger(__name__)

    logger.info("Starting order expiration check...")
"""

import logging
import os
import sys
from functools import cache

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Transport loggers that emit a line per PostgREST call
QUIET_LOGGERS = ("httpx", "httpcore")


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _formatter() -> logging.Formatter:
    # Vercel's log drain stamps each line itself
    on_vercel = os.environ.get("VERCEL") == "1"
    return logging.Formatter(LOG_FORMAT_SIMPLE if on_vercel else LOG_FORMAT)


def _setup_logging() -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    level = _level_from_env()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_formatter())
    handler.setLevel(level)
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


_setup_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass ``__name__``."""
    return logging.getLogger(name)


def _escape_log_injection(value: str) -> str:
    """Escape control characters that could forge log entries (CWE-117)."""
    return (
        value.replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
        .replace("\x00", "")
    )


def sanitize_string_for_logging(value: object | None, max_length: int = 200) -> str:
    """
    Make an arbitrary value safe to interpolate into a log line.

    Request bodies and backend error messages are not under our control,
    so they are escaped and truncated before logging.

    Args:
        value: Value to sanitize (can be None)
        max_length: Maximum length to keep

    Returns:
        Sanitized string or "N/A" if empty
    """
    if value is None or value == "":
        return "N/A"
    safe_value = _escape_log_injection(str(value))
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "LOG_FORMAT",
    "LOG_FORMAT_SIMPLE",
    "get_logger",
    "sanitize_string_for_logging",
]
