"""
Module execution entry point.

Allows running with: python -m impactledger_cli
"""

import sys
from impactledger_cli.main import main

if __name__ == "__main__":
    sys.exit(main())
