import logging
import sys
from typing import Optional


ROOT_LOGGER_NAME = "record_analysis"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Library code logs through the host application's handlers
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())

_stdout_handler: Optional[logging.Handler] = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return the package logger, or a child of it.

    Args:
        name: Dotted suffix under "record_analysis" (e.g. "service").
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not name:
        return root
    return root.getChild(name)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Attach a single stdout handler to the package logger.

    Called by the command line entry point only. Safe to call more
    than once; the handler is added the first time.

    Args:
        level: Optional level name (defaults to INFO).
    """
    global _stdout_handler
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _stdout_handler is None:
        _stdout_handler = logging.StreamHandler(sys.stdout)
        _stdout_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(_stdout_handler)
        root.propagate = False
    root.setLevel((level or "INFO").upper())
    return root
