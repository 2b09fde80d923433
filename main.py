#!/usr/bin/env python

"""
Urenstaat - Main Entry Point

Track daily hours per project per ISO week, review a month as a projects x
days matrix and export it to a signed .xlsx time sheet.

Usage:
    python main.py --help

Requirements:
    - Python 3.10+
    - See pyproject.toml for dependencies
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from urenstaat.cli import cli


def main():
    """Main entry point"""
    return cli()


if __name__ == "__main__":
    sys.exit(main())
