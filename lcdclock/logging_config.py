"""Loguru logging configuration for lcdclock."""

import os
import sys

from loguru import logger

LOG_FORMAT = "<level>{time:YYYY-MM-DD HH:mm:ss} | {name}:{function}:{line} | {message}</level>"


def setup_logging(level: str | None = None) -> None:
    """
    Replace loguru's default handler with a single stderr sink.

    Args:
        level: Minimum level to emit. Defaults to ``LOG_LEVEL`` from the
            environment, or ``INFO``.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "INFO")

    logger.remove()
    logger.add(
        sys.stderr,
        format=LOG_FORMAT,
        level=level.upper(),
        colorize=True,
        backtrace=True,
        diagnose=True,
    )
