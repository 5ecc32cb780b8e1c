"""
Interfaces to the components surrounding the extraction pipeline.

The pipeline consumes settings, a message channel, URL validation and engine
capabilities through these narrow interfaces; default implementations are
provided for standalone use.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable
from urllib.parse import urlsplit

from .config import ExtractSettings
from .messages import Message
from .models import EventOrigin, SearchMode

MAX_URL_LENGTH = 2048

TokenFactory = Callable[[], str]
UrlValidator = Callable[[str], bool]


@dataclass(frozen=True)
class ParseOptions:
    """Stored options read once per invocation."""

    img_full_parse: bool = False
    search_mode_action: SearchMode = SearchMode.SELECT
    search_mode_context_menu: SearchMode = SearchMode.SELECT

    def search_mode(self, origin: EventOrigin) -> SearchMode:
        if origin is EventOrigin.ACTION:
            return self.search_mode_action
        return self.search_mode_context_menu


@runtime_checkable
class OptionsSource(Protocol):
    async def read_options(self) -> ParseOptions: ...


@runtime_checkable
class MessageChannel(Protocol):
    async def send(self, message: Message) -> None: ...


@runtime_checkable
class EngineCapabilities(Protocol):
    async def has_url_support(self, engine: str) -> bool: ...


class SettingsOptionsSource:
    """Reads stored options from the settings object."""

    def __init__(self, settings: ExtractSettings):
        self.settings = settings

    async def read_options(self) -> ParseOptions:
        return ParseOptions(
            img_full_parse=self.settings.img_full_parse,
            search_mode_action=self.settings.search_mode_action,
            search_mode_context_menu=self.settings.search_mode_context_menu,
        )


class StaticEngineCapabilities:
    """Engine capabilities from a fixed list of engines that accept image URLs."""

    def __init__(self, url_engines: Iterable[str]):
        self.url_engines = frozenset(url_engines)

    async def has_url_support(self, engine: str) -> bool:
        return engine in self.url_engines


def validate_url(url: str | None) -> bool:
    """Whether a string is a fetchable absolute http(s) URL."""
    if not url or len(url) > MAX_URL_LENGTH:
        return False
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.hostname)


def new_token() -> str:
    return str(uuid.uuid4())
