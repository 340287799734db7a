"""Logging setup for sizescope."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(threadName)s - %(message)s"


def resolve_level(name: str) -> int:
    """Map a level name to its number; anything that is not a level gives INFO."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def _open_log_file(file: str) -> logging.Handler:
    log_path = Path(file)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(log_path, mode="a", encoding="utf-8")


def setup_logging(level: str = "WARNING", file: str | None = None, console: bool = True) -> None:
    """
    Point the root logger at sizescope's handlers, replacing any already set.

    Args:
        level: Level name (DEBUG, INFO, ...); unknown names fall back to INFO.
        file: Optional log file, appended to; parent folders are created.
        console: Whether to log to stderr.
    """
    handlers: list[logging.Handler] = []
    if file:
        handlers.append(_open_log_file(file))
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(resolve_level(level))
