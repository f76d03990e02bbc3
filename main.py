"""Main entry point for the StarRupture save fixer."""

import sys

from save_fixer.cli import main


if __name__ == "__main__":
    sys.exit(main())
