"""Shared configuration and logging for the feasibility core."""

from .config import Settings, get_settings, settings
from .logging import configure_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "configure_logging",
    "get_logger",
]
