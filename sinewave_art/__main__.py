"""Allow ``python -m sinewave_art``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
