"""loguru setup for command-line runs."""

from __future__ import annotations

import sys

from loguru import logger

__all__ = ["LOG_FORMAT", "configure_logging"]

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> int:
    """
    Replace loguru's default sink with one colourised stderr sink.

    Args:
        level: Minimum level name (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Returns:
        The id of the added sink.
    """
    logger.remove()
    return logger.add(
        sink=sys.stderr,
        level=level.upper(),
        format=LOG_FORMAT,
        colorize=True,
    )
