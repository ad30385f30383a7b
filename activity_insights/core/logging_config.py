"""
Logging configuration for the insight engine and its command line.

Console output goes to stderr so exports written to stdout stay clean.
A rotating file under config.logs_dir keeps a history of insight runs.
"""

import logging
import logging.handlers
import sys
from typing import Optional

from .config import config


def setup_logging(
    logger_name: str = "activity_insights",
    level: Optional[str] = None,
    log_to_file: bool = True,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        logger_name: Name of the logger (the package logger by default, so
            module loggers created with logging.getLogger(__name__) inherit it)
        level: Level name overriding config.log_level
        log_to_file: Also write to <logs_dir>/<logger_name>.log

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)
    level = (level or config.log_level).upper()
    logger.setLevel(level)

    # Handlers are attached once per process; later calls only adjust the level
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_to_file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.logs_dir / f"{logger_name}.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
