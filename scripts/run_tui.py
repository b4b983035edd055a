#!/usr/bin/env python3
"""Entry point for the RoboScout match list TUI.

Usage:
    python scripts/run_tui.py RE-VRC-23-1234 [--division ID]
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from textual.logging import TextualHandler

from roboscout.config import load_settings
from roboscout.tui.app import RoboScoutApp


def main():
    parser = argparse.ArgumentParser(description="Show the match list for an event division")
    parser.add_argument("sku", help="Event SKU, e.g. RE-VRC-23-1234")
    parser.add_argument("--division", type=int, default=None, help="Division id (default: first division)")
    args = parser.parse_args()

    settings = load_settings(project_root / ".env")
    # The TUI owns the terminal, so log records go to the Textual devtools console
    logging.basicConfig(level=settings.log_level, handlers=[TextualHandler()])

    app = RoboScoutApp(sku=args.sku, division_id=args.division, settings=settings)
    app.run()


if __name__ == "__main__":
    main()
