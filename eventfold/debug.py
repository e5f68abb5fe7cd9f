"""Trace output for troubleshooting.

Every eventfold module logs through a child of the ``eventfold`` logger, so a
single handler on that logger captures binds, loads, saves and fetches.
"""

import logging
import sys
from typing import TextIO

LOGGER_NAME = "eventfold"
TRACE_FORMAT = "%(asctime)s.%(msecs)03d %(name)s %(message)s"
TRACE_DATEFMT = "%b %d %H:%M:%S"


def enable_debug(stream: TextIO | None = None) -> logging.Handler:
    """Write DEBUG trace lines for the whole package to ``stream``.

    Args:
        stream: Where to write. Defaults to stderr.

    Returns:
        The attached handler, for :func:`disable_debug`.

    Example:
        >>> handler = enable_debug(sys.stdout)
        >>> ...
        >>> disable_debug(handler)
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATEFMT))

    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return handler


def disable_debug(handler: logging.Handler) -> None:
    """Detach a handler returned by :func:`enable_debug`."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.removeHandler(handler)
    if not any(h.level <= logging.DEBUG for h in logger.handlers):
        logger.setLevel(logging.NOTSET)
