"""
Command line entry point for the Thunderbird updater.
This allows running the module as: python -m tb_updater
"""

from .cli import main
import sys

if __name__ == "__main__":
    sys.exit(main())
