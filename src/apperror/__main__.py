"""Allow ``python -m apperror``."""

from apperror.cli.main import main

main()
