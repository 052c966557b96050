"""Logging configuration shared by the CLI and the API."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Send records from every logger to stdout at ``level``."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # per-request access lines drown out the game log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
