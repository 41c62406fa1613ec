"""
Entry point for running the admin tools as a module.

Usage:
    python -m moviedb <command>
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
