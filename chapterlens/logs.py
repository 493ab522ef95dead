"""
Loguru sink configuration.

Library modules only call `logger`; entry points decide where it goes.
"""
from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <cyan>{name}</cyan> - <level>{message}</level>"


def configure_logging(level: str = "WARNING", verbose: bool = False) -> None:
    """Replace the default loguru sink with a single stderr sink."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else level,
        format=LOG_FORMAT if verbose else "<level>{message}</level>",
    )
