"""Logging setup shared by the GUI and the headless sync."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "lingqsync"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def setup_logger(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Configure the package logger once per process.

    Adds a console handler and, unless disabled with ``log_dir=""``,
    a rotating file handler in ``log_dir`` (defaults to $LOG_DIR or ./logs).

    Args:
        level: Log level name
        log_dir: Directory for the rotating log file
        max_bytes: Rotation threshold
        backup_count: Number of rotated files to keep

    Returns:
        The configured package logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    if logger.handlers:
        return logger

    fmt = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(fmt)
    logger.addHandler(console)

    if log_dir is None:
        log_dir = os.getenv("LOG_DIR", "logs")
    if log_dir:
        path = Path(log_dir)
        try:
            path.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                path / "lingqsync.log",
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning("Could not open log file in %s: %s", path, e)
        else:
            file_handler.setFormatter(fmt)
            logger.addHandler(file_handler)

    logger.propagate = False
    return logger
