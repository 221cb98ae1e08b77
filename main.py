#!/usr/bin/env python
"""
POS Print Relay - Standalone Entry Point

Run directly:
    python main.py

Or with environment variables:
    POS_PRINT_PORT=9978 POS_PRINT_TOKEN=secret python main.py
"""

import os
import sys

# Ensure package is importable when running directly
if __name__ == '__main__':
    package_dir = os.path.dirname(os.path.abspath(__file__))
    if package_dir not in sys.path:
        sys.path.insert(0, package_dir)

from pos_print_relay.__main__ import main


if __name__ == '__main__':
    main()
