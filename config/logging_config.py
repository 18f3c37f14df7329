"""
Logging configuration - single place to obtain module loggers.

Usage:
    from config.logging_config import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Attach one stream handler to the root logger (idempotent)."""
    global _configured
    if _configured:
        return

    if level is None:
        from config.settings import settings
        level = settings.log_level

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))

    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level.upper())
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a named logger. Handlers are configured by setup_logging()."""
    return logging.getLogger(name)
