"""sbi-extract Command Line Interface.

Usage:
    python -m sbi_extract.cli extract https://example.com --x 120 --y 340

Or via the installed entry point:
    sbi-extract --help
"""

from .main import main

__all__ = ["main"]
