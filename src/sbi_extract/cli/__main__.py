"""Allow ``python -m sbi_extract.cli``."""

from .main import main

main()
