#!/usr/bin/env python3
"""
logging_setup.py
================
Configures the root logger with a console handler and a rotating file
handler (``highway.log``, 1 MB, 2 backups).

Call :func:`setup_logging` once at startup before any other ``import``
triggers ``logging.getLogger()``.
"""

import logging
from logging.handlers import RotatingFileHandler

from config import LOG_FILE, WORLD_DEBUG_LOG_FILE


def setup_logging(
    level: int = logging.INFO,
    log_file: str = LOG_FILE,
    world_debug_file: str = WORLD_DEBUG_LOG_FILE,
) -> None:
    """Apply a unified log format to both console and file output.

    Parameters
    ----------
    level : int
        Minimum severity level (e.g. ``logging.DEBUG``, ``logging.INFO``).
    log_file : str
        Path of the rotating main log.
    world_debug_file : str
        Path of the dedicated DEBUG log for the ``world`` logger.
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(fmt)

    fh = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=2)
    fh.setLevel(level)
    fh.setFormatter(fmt)

    root.handlers.clear()
    root.addHandler(ch)
    root.addHandler(fh)

    # ── Dedicated debug file for the per-tick host state dump ─────────
    world_logger = logging.getLogger("world")
    world_logger.setLevel(logging.DEBUG)
    for handler in list(world_logger.handlers):
        world_logger.removeHandler(handler)
        handler.close()
    dfh = RotatingFileHandler(
        world_debug_file, maxBytes=5_000_000, backupCount=2
    )
    dfh.setLevel(logging.DEBUG)
    dfh.setFormatter(fmt)
    world_logger.addHandler(dfh)
