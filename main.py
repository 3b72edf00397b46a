#!/usr/bin/env python3
"""
Main entry point for the viral video finder CLI
"""

import sys
import asyncio

from viral_finder.cli import main

if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
