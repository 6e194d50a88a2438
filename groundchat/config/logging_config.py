"""Centralized logging setup with consistent formatting."""

import logging
import sys

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: int | str = logging.INFO,
    log_format: str | None = None,
    logger_name: str = "groundchat",
) -> logging.Logger:
    """
    Configure logging for groundchat.

    Args:
        level: Logging level, as int or name (default: INFO)
        log_format: Custom format string (optional)
        logger_name: Name of the package logger to return

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(
        level=level,
        format=log_format or DEFAULT_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    return logger
