"""
Entry point for running the flow linter as a module.

Usage:
    python -m flowlinter scan -d force-app
    python -m flowlinter --help
"""

import sys
from flowlinter.cli import main

if __name__ == "__main__":
    sys.exit(main())
