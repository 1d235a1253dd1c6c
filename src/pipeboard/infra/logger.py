"""
Logging setup for the ``pipeboard`` logger hierarchy.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILENAME = "pipeboard.log"


def setup_logging(
    level: str | int = logging.INFO,
    log_dir: Path | None = None,
    *,
    stream: bool = True,
) -> logging.Logger:
    """Configure the package logger with consistent formatting.

    Existing handlers on the ``pipeboard`` logger are replaced so the call
    can be repeated safely.

    Args:
        level: Level name or number.
        log_dir: Directory for ``pipeboard.log``; no file is written if None.
        stream: Whether to also log to stderr.

    Returns:
        The configured ``pipeboard`` logger.
    """
    logger = logging.getLogger("pipeboard")
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if stream:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_dir / LOG_FILENAME, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
