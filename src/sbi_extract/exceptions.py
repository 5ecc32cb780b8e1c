"""
Exception types and timeout utilities for image extraction.

Provides:
- Specific exception types for the extraction failure modes
- Timeout handling for probes and loads
"""

from __future__ import annotations

import asyncio
from typing import Any


class ImageExtractionError(Exception):
    """Base exception for image extraction errors."""

    pass


class TouchTargetMissingError(ImageExtractionError):
    """Raised when no interaction target was registered for the invocation."""

    pass


class UnsupportedDocumentError(ImageExtractionError):
    """Raised when the document root is neither an HTML nor an SVG page."""

    pass


class DocumentAccessError(ImageExtractionError):
    """Raised when the page does not expose its document node."""

    pass


class ImageLoadError(ImageExtractionError):
    """Raised when a referenced image cannot be read or decoded."""

    pass


class FetchError(ImageExtractionError):
    """Raised when a remote image fetch fails."""

    pass


class ExtractionTimeoutError(ImageExtractionError):
    """Raised when an extraction operation times out."""

    pass


async def with_timeout(
    coro: Any,
    timeout_seconds: float,
    operation_name: str = "operation",
) -> Any:
    """
    Execute a coroutine with a timeout.

    Args:
        coro: Coroutine to execute.
        timeout_seconds: Timeout in seconds.
        operation_name: Name for error messages.

    Returns:
        Result of the coroutine.

    Raises:
        ExtractionTimeoutError: If the operation times out.
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        raise ExtractionTimeoutError(f"{operation_name} timed out after {timeout_seconds}s")
