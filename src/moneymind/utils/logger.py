"""Logging configuration and utilities.

Library code only ever asks for a logger; handlers are installed by
``setup_logging``, which the CLI calls when a log level or log file is
configured.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from pythonjsonlogger.json import JsonFormatter

ROOT_LOGGER_NAME = "moneymind"


def setup_logging(
    log_level: str = "INFO",
    log_file_path: Optional[str] = None,
    json_format: bool = False,
    log_rotation_size: int = 10485760,  # 10MB
    log_retention_count: int = 5,
) -> logging.Logger:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file_path: Optional path of a rotating log file
        json_format: Use JSON formatting for logs
        log_rotation_size: Max log file size before rotation (bytes)
        log_retention_count: Number of rotated log files to keep

    Returns:
        The configured ``moneymind`` logger

    Raises:
        ValueError: If the log level name is unknown
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{log_level}'")

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if json_format:
        console_formatter = JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s"
        )
    else:
        console_formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file_path:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=log_rotation_size,
            backupCount=log_retention_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        if json_format:
            file_formatter = JsonFormatter(
                "%(asctime)s %(name)s %(levelname)s %(module)s %(funcName)s %(lineno)d %(message)s"
            )
        else:
            file_formatter = logging.Formatter(
                "[%(asctime)s] %(levelname)s - %(name)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Prevent propagation to root logger
    logger.propagate = False

    logger.debug(f"Logging initialized at {log_level.upper()} level")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module, nested under the ``moneymind`` logger.

    Args:
        name: Logger name (typically __name__)
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
