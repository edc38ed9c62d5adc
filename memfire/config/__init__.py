"""Configuration module."""

from memfire.config.logging import (
    configure_logging,
    configure_logging_from_settings,
    get_logger,
)
from memfire.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "get_settings",
]
