"""Utility functions for Intersector."""

from intersector.utils.logging import ProgressLogger, Timer, get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "ProgressLogger",
    "Timer",
]
