"""
Logging setup for the bakery core.

Usage:
    from bakery.logging import get_logger
    logger = get_logger(__name__)

The root logger is configured on first import from LOG_LEVEL and
BAKERY_ENV. Applications that already installed handlers keep them.
"""

import logging
import os
import sys
from functools import cache

LOG_FORMATS = {
    "development": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    "production": "%(levelname)s - %(name)s - %(message)s",
}

# Catalog ids and product names come from the backend; keep them on one line
_LOG_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def _level_from_env() -> int:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(force: bool = False) -> bool:
    """
    Attach a stdout handler to the root logger.

    Args:
        force: replace handlers that are already installed

    Returns:
        True if a handler was installed
    """
    root = logging.getLogger()
    if root.handlers and not force:
        return False

    for handler in list(root.handlers):
        root.removeHandler(handler)

    env = os.environ.get("BAKERY_ENV", "development")
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMATS.get(env, LOG_FORMATS["development"])))

    root.setLevel(_level_from_env())
    root.addHandler(handler)

    # upstash-redis talks REST through httpx, one log line per request
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    return True


configure_logging()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: str | None, max_length: int = 8) -> str:
    """Escape control characters and keep the first ``max_length`` chars."""
    if not id_value:
        return "N/A"
    return str(id_value).translate(_LOG_ESCAPES)[:max_length]


__all__ = [
    "LOG_FORMATS",
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
]
