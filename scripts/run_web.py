#!/usr/bin/env python3
"""Start the RoboScout Web API server."""

import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn

from roboscout.config import load_settings

if __name__ == "__main__":
    settings = load_settings(project_root / ".env")
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    uvicorn.run(
        "roboscout.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_dirs=[str(project_root / "roboscout")],
    )
