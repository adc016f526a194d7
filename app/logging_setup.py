"""
app/logging_setup.py -- Logging configuration for the desktop host.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
host calls ``setup_logging()`` once at startup to decide where output goes.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

_HANDLER_NAME = "character-recovery-console"


def setup_logging(level: int = logging.INFO) -> logging.Handler:
    """Attach a console handler to the root logger (once) and set *level*.

    Returns the handler so callers can adjust or remove it.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            return handler

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    root.addHandler(handler)
    return handler
