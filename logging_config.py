"""
Logging setup for the BookBridge API.

Call ``configure_logging()`` once at application startup.
"""

import logging
import sys
from typing import Optional

import config

_CONFIGURED = False


def configure_logging(
    level: Optional[str] = None,
    fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
) -> None:
    """Configure the root logger exactly once.

    ``level`` falls back to the ``LOG_LEVEL`` setting, then ``INFO``.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    resolved = logging.getLevelName((level or config.LOG_LEVEL).upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    root = logging.getLogger()
    root.setLevel(resolved)

    # uvicorn may already have installed its own handlers
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        root.addHandler(handler)

    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    _CONFIGURED = True
