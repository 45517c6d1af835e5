"""Allow running the renderer with ``python -m src.spheretrace``."""

import sys

from src.spheretrace.cli import main

if __name__ == "__main__":
    sys.exit(main())
