"""Logging configuration for the feasibility core.

The engines only ever call ``get_logger(__name__)``; configuring handlers is
left to the application that embeds them (``configure_logging`` is the
one-call setup for scripts and services).
"""

import logging
from typing import Optional

from .config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging.

    Args:
        level: Level name ("DEBUG", "INFO", ...). Defaults to
            ``settings.LOG_LEVEL``.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
    logging.getLogger(__name__).info("Logging initialized with level %s", level_name)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger.

    Usage:
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)
