"""
Structured logging configuration for the entire application.
Call setup_logging() once at startup (main.py).
"""

import logging
import sys


def setup_logging(level: str = "INFO"):
    """Configure structured logging to stdout for the 'app' namespace."""
    root = logging.getLogger("app")
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO
    root.setLevel(numeric_level)

    # Re-running setup (reload, tests) must not stack handlers
    if any(getattr(h, "_app_handler", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    handler._app_handler = True

    root.addHandler(handler)
