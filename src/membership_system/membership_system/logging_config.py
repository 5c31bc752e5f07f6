"""Centralized logging configuration.

Modules obtain loggers with ``logging.getLogger(__name__)``; the application
factory calls :func:`configure_logging` once at startup.

Usage:
    from membership_system.logging_config import configure_logging

    configure_logging("DEBUG", log_dir="logs")
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional

DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_RETENTION_DAYS = int(os.getenv("LOG_RETENTION_DAYS", "30"))

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Parent of every module logger in this package, however it was imported.
PACKAGE_LOGGER = __name__.rpartition(".")[0]


def configure_logging(level: Optional[str] = None, *, log_dir: Optional[str] = None) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Log level name (DEBUG, INFO, ...). Defaults to LOG_LEVEL env.
        log_dir: If given, also write a daily-rotated file there.

    Returns:
        The configured package logger.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)

    # Avoid adding duplicate handlers
    if logger.handlers:
        return logger

    log_level = getattr(logging, (level or DEFAULT_LOG_LEVEL).upper(), logging.INFO)
    logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            filename=path / f"app_{datetime.now().strftime('%Y-%m-%d')}.log",
            when="midnight",
            interval=1,
            backupCount=LOG_RETENTION_DAYS,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
