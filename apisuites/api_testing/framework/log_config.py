"""
================================================================================
Logging Configuration
================================================================================

Centralized Loguru set-up for the harness. Level, format and an optional
rotating log file come from the `logging` section of config.yaml.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from .config_loader import ConfigLoader


DEFAULT_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
)

_logger_initialized: bool = False


def init_logger(
    config: Optional[ConfigLoader] = None,
    level: Optional[str] = None,
    format_str: Optional[str] = None,
) -> None:
    """
    Initializes the global Loguru logger with consistent configuration.

    Safe to call repeatedly; only the first call configures sinks.

    Args:
        config: Configuration loader. Creates new one if None.
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_str: Custom log format string. Defaults to config value.
    """
    global _logger_initialized

    if _logger_initialized:
        return

    config = config or ConfigLoader()

    log_level = (level or config.get("logging.level", "INFO")).upper()
    log_format = format_str or config.get("logging.format", DEFAULT_LOG_FORMAT)

    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format=log_format,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    log_file = config.get("logging.file", None)
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=log_level,
            format=log_format.replace("{level: <8}", "{level}"),  # no padding in files
            rotation=config.get("logging.rotation", "10 MB"),
            retention=config.get("logging.retention", "7 days"),
            compression="zip",
        )

    _logger_initialized = True
    logger.debug(f"Logger initialized with level: {log_level}")


def reset_logger() -> None:
    """Allow init_logger to configure sinks again (tests)."""
    global _logger_initialized
    _logger_initialized = False


__all__ = ["init_logger", "reset_logger"]
