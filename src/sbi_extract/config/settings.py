"""Configuration management for sbi-extract using pydantic-settings.

Settings are read from environment variables prefixed with ``SBI_`` and from
an optional ``.env`` file, with type validation.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from ..models import TOUCH_MARGIN, SearchMode

DEFAULT_URL_ENGINES = [
    "google",
    "bing",
    "yandex",
    "baidu",
    "sogou",
    "tineye",
    "saucenao",
    "iqdb",
    "ascii2d",
]


class ExtractSettings(BaseSettings):
    """Main configuration settings for image extraction."""

    # Stored user options
    img_full_parse: bool = Field(
        False, description="Scan the whole page even when an image element was targeted"
    )
    search_mode_action: SearchMode = Field(
        SearchMode.SELECT, description="Search mode for toolbar invocations"
    )
    search_mode_context_menu: SearchMode = Field(
        SearchMode.SELECT, description="Search mode for context menu invocations"
    )

    # Environment
    target_env: Literal["chrome", "edge", "firefox", "opera", "safari", "samsung"] = Field(
        "chrome", description="Browser platform the extraction runs on"
    )
    url_engines: list[str] = Field(
        default_factory=lambda: list(DEFAULT_URL_ENGINES),
        description="Engines that accept an image URL instead of an upload",
    )

    # Extraction settings
    touch_margin: float = Field(
        TOUCH_MARGIN, ge=0.0, description="Margin around the touch point in CSS pixels"
    )
    fetch_timeout: float = Field(120.0, gt=0.0, description="Timeout for remote image fetches")
    probe_timeout: float = Field(30.0, gt=0.0, description="Timeout for image probes")

    # Browser settings (command line)
    headless: bool = Field(True, description="Run the browser without a window")
    navigation_timeout: float = Field(60.0, gt=0.0, description="Page navigation timeout")

    # Logging settings
    debug_mode: bool = Field(False, description="Enable debug logging")
    log_level: str = Field("INFO", description="Log level")
    log_file: Path | None = Field(None, description="Optional log file")

    class Config:
        """Pydantic configuration."""

        env_file = ".env"
        env_prefix = "SBI_"
        case_sensitive = False
        extra = "ignore"


# Singleton instance
_settings: ExtractSettings | None = None


def get_settings() -> ExtractSettings:
    """Get the singleton settings instance."""
    global _settings

    if _settings is None:
        _settings = ExtractSettings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (mainly for testing)."""
    global _settings
    _settings = None
