#!/usr/bin/env python3
"""
redeye - Automatic red-eye removal
Main entry point for the application
"""

import sys

from redeye.cli import main

if __name__ == "__main__":
    sys.exit(main())
