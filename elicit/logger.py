"""Application-level logging utilities."""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional


def setup_logger(name: str = "elicit", level: Optional[int] = None) -> logging.Logger:
    """Return a configured logger instance."""
    # DEBUG_ELICIT=true switches the whole engine to debug output
    if level is None:
        debug = os.getenv("DEBUG_ELICIT", "false").lower() == "true"
        level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger(name)

    # Re-running setup (reloads, uvicorn workers) must not stack handlers
    logger.handlers.clear()

    # stdout, so uvicorn and container logs pick it up alongside access logs
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    # Timestamped, with the module name for per-component filtering
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False  # Don't propagate to root logger

    return logger


LOGGER: logging.Logger = setup_logger()

__all__ = ["LOGGER", "setup_logger"]
