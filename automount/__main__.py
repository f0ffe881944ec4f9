#!/usr/bin/env python3
"""
Main entry point for the automount tool.
"""
from automount.cli import main

if __name__ == "__main__":
    import sys
    sys.exit(main())
