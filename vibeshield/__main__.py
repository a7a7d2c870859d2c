#!/usr/bin/env python3
"""
Vibe Shield module entry point
Allows running: python3 -m vibeshield
"""

from vibeshield.cli import main

if __name__ == '__main__':
    main()
