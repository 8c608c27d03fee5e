"""
Main entry point for the pfsense_control package.

Allows running the CLI as: python -m pfsense_control
"""

import sys

from pfsense_control.cli import main

if __name__ == "__main__":
    sys.exit(main())
