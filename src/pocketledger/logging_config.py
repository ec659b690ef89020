"""Logging setup for the pocketledger logger hierarchy."""

import logging
import sys
import threading
from typing import Any

_LOGGER_PREFIX = "pocketledger"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(level: int = logging.WARNING, stream: Any = None) -> logging.Logger:
    """Configure the pocketledger logger (idempotent).

    The first call attaches a stream handler; later calls only change the level.
    """
    global _handler
    logger = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        if _handler is None:
            _handler = logging.StreamHandler(stream or sys.stderr)
            _handler.setFormatter(logging.Formatter(_FORMAT))
            logger.addHandler(_handler)
            logger.propagate = False
    logger.setLevel(level)
    return logger


def reset_logging() -> None:
    """Remove the handler added by configure_logging. For tests."""
    global _handler
    logger = logging.getLogger(_LOGGER_PREFIX)
    with _lock:
        if _handler is not None:
            logger.removeHandler(_handler)
            _handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
