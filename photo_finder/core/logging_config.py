"""Logging configuration for the photo finder pipeline.

This module provides structured logging with timestamps, module names,
and configurable log levels. Every logger writes coloured output to the
console and, when LOG_FILE is set, plain text to that file so a long
photo analysis run leaves a record behind.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels (terminal only)."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors if terminal supports it."""
        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            # Color a copy so other handlers see the plain record
            record = logging.makeLogRecord(record.__dict__)
            levelname = record.levelname
            if levelname in self.COLORS:
                record.levelname = (
                    f"{self.COLORS[levelname]}{self.BOLD}{levelname}{self.RESET}"
                )
                record.name = f"{self.BOLD}{record.name}{self.RESET}"

        return super().format(record)


def _settings_from_env() -> Tuple[str, Optional[Path]]:
    """Read LOG_LEVEL and LOG_FILE, falling back to INFO and no file."""
    from photo_finder.core.config import Config

    try:
        config = Config.from_env()
    except ValueError:
        return "INFO", None
    return config.log_level, config.log_file


def setup_logging(
    name: str = "photo_finder",
    level: Optional[str] = None,
    log_file: Optional[str | Path] = None,
) -> logging.Logger:
    """Setup and configure logger with consistent formatting.

    Args:
        name: Logger name (usually module name or 'photo_finder' for root)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If None, reads LOG_LEVEL from the environment.
        log_file: File to also log to, without colors. If None, LOG_FILE
                  from the environment is used when set. Parent
                  directories are created.

    Returns:
        Configured logger instance.

    Example:
        >>> logger = setup_logging(__name__)
        >>> logger.info("Analysis started")
    """
    logger = logging.getLogger(name)

    # If logger already has handlers, return it (avoid duplicate handlers)
    if logger.handlers:
        return logger

    if level is None or log_file is None:
        env_level, env_log_file = _settings_from_env()
        level = level or env_level
        log_file = log_file or env_log_file

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logger.level)

    # Format: 2025-11-04 15:30:45 | INFO | photo_finder.services.analysis | Message
    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_fmt = "%Y-%m-%d %H:%M:%S"

    console_handler.setFormatter(ColoredFormatter(fmt, datefmt=date_fmt))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(logger.level)
        file_handler.setFormatter(logging.Formatter(fmt, datefmt=date_fmt))
        logger.addHandler(file_handler)

    # Prevent propagation to root logger (avoid duplicate messages)
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get logger for a specific module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Configured logger instance.

    Example:
        >>> from photo_finder.core.logging_config import get_logger
        >>> logger = get_logger(__name__)
    """
    return setup_logging(name)
