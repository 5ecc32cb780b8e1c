"""Logging module for sbi-extract."""

from .logger import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
