"""Console sink configuration for loguru."""
from __future__ import annotations

import sys
from typing import Optional, TextIO

from loguru import logger

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}"


def configure_logging(level: str = "INFO", debug: bool = False, stream: Optional[TextIO] = None) -> int:
    """Replace loguru's default handler with a single console sink.

    Args:
        level: Minimum level for the console sink
        debug: Force DEBUG level unless ``level`` is already more verbose
        stream: Target stream (defaults to stderr)

    Returns:
        The loguru sink id of the console sink
    """
    if debug and level not in ("TRACE", "DEBUG"):
        level = "DEBUG"
    logger.remove()
    return logger.add(stream or sys.stderr, level=level, format=CONSOLE_FORMAT)
