"""Logging configuration.

Sets up console logging for scripts and services embedding the bucket client.
"""

import logging
import os


def setup_console_logging(level: str | None = None) -> logging.Logger:
    """Set up console logging.

    Args:
        level: Log level name. Falls back to EASY_BUCKET_LOG_LEVEL, then WARNING.

    Returns:
        The package logger.
    """
    console_level = level or os.getenv("EASY_BUCKET_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, console_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    return logging.getLogger("easy_bucket")
