"""Structured logging for sbi-extract using structlog.

Events go to stderr (and optionally a file); stdout carries only the
outbound messages of the command line tool. Embedded image references are
shortened before rendering so a single candidate cannot flood the log.
"""

import logging
import sys
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any, cast

import structlog

from ..config import get_settings

# Longest data URL rendered in full
MAX_REFERENCE_LENGTH = 96


def shorten_references(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Truncate embedded ``data:`` payloads in event values."""
    for key, value in event_dict.items():
        if isinstance(value, str) and value.startswith("data:") and len(value) > MAX_REFERENCE_LENGTH:
            event_dict[key] = f"{value[:MAX_REFERENCE_LENGTH]}...({len(value)} chars)"
    return event_dict


def _build_processors(structured: bool, add_timestamp: bool, colorize: bool) -> list[Any]:
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        shorten_references,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    processors += [
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if structured:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=colorize))
    return processors


def _build_handlers(console: bool, log_file: Path | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
    return handlers or [logging.NullHandler()]


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    structured: bool = True,
    console: bool = True,
    add_timestamp: bool = True,
    colorize: bool = True,
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        structured: Render events as JSON lines
        console: Write events to stderr
        add_timestamp: Add ISO timestamps to events
        colorize: Colorize console output (only for non-structured)
    """
    structlog.configure(
        processors=_build_processors(structured, add_timestamp, colorize and console),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        handlers=_build_handlers(console, log_file),
        force=True,
    )


_logging_initialized = False


def _ensure_logging_initialized() -> None:
    """Initialize logging from settings on first use."""
    global _logging_initialized

    if _logging_initialized:
        return

    try:
        settings = get_settings()
        setup_logging(
            level="DEBUG" if settings.debug_mode else settings.log_level,
            log_file=settings.log_file,
            structured=not settings.debug_mode,
            colorize=settings.debug_mode,
        )
    except (OSError, ValueError):
        # Invalid settings are reported by the caller that needs them
        setup_logging(level="INFO", structured=False)

    _logging_initialized = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    _ensure_logging_initialized()
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
