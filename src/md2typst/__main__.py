"""Entry point for running md2typst as a module.

This allows the package to be executed as:
    python -m md2typst [arguments]
"""

import sys

from md2typst.cli import main

if __name__ == "__main__":
    sys.exit(main())
