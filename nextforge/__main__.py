"""Allow ``python -m nextforge``."""

from nextforge.cli import main

main()
