"""Allow ``python -m dayclock``."""

from dayclock.cli import main

main()
