"""Configuration package.

Usage:
    from sbi_extract.config import get_settings

    settings = get_settings()
    if settings.img_full_parse:
        ...
"""

from .settings import DEFAULT_URL_ENGINES, ExtractSettings, get_settings, reset_settings

__all__ = [
    "DEFAULT_URL_ENGINES",
    "ExtractSettings",
    "get_settings",
    "reset_settings",
]
