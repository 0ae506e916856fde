"""
Entry point for running the security scanner as a module.

Usage:
    python -m cognitivetrust scan app.py
    python -m cognitivetrust --help
"""

import sys
from cognitivetrust.cli import main

if __name__ == "__main__":
    sys.exit(main())
