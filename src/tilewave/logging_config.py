"""
Centralized logging configuration for tilewave.

Library modules only create loggers; handlers are installed once by the application entry point.

Usage:
    from tilewave.logging_config import setup_logging
    setup_logging()  # Call once at startup

All tilewave.* loggers write to the console, and optionally to a rotating log file.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from tilewave import constants


def setup_logging(
    console_level: int = logging.WARNING,
    log_file: Path | str | None = None,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """
    Configure the logging system for tilewave.

    Args:
        console_level: Level for console output (default: WARNING)
        log_file: Optional path of a rotating log file
        file_level: Level for file logging (default: DEBUG)

    Returns:
        The package root logger
    """
    root_logger = logging.getLogger(constants.LOGGER_ROOT_NAME)
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers (for re-initialization)
    root_logger.handlers.clear()

    console_formatter = logging.Formatter(fmt="%(levelname)-8s | %(name)-30s | %(message)s")
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_formatter = logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-30s | %(funcName)-25s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=constants.LOG_FILE_MAX_SIZE,
            backupCount=constants.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)
        root_logger.debug(f"Log file: {log_path.absolute()}")

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger configured as child of the tilewave logger
    """
    if name == constants.LOGGER_ROOT_NAME or name.startswith(f"{constants.LOGGER_ROOT_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{constants.LOGGER_ROOT_NAME}.{name}")


def log_phase(
    logger: logging.Logger,
    phase: str,
    status: str,
    details: str | None = None,
) -> None:
    """Log a generation phase boundary."""
    details_str = f" | {details}" if details else ""
    logger.debug(f"PHASE | {phase} | {status}{details_str}")


def log_contradiction(
    logger: logging.Logger,
    cell_index: int,
    tile_type: str,
    direction_name: str,
) -> None:
    """Log a recovered contradiction."""
    logger.debug(
        f"CONTRADICTION | cell={cell_index} | source={tile_type} | direction={direction_name} | reset to uniform"
    )
