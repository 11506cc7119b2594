"""Module entry-point for ``python -m lazyprops``."""

import sys

from lazyprops.cli import main

if __name__ == "__main__":
    sys.exit(main())
