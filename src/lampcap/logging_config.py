"""Handlers for the ``lampcap`` logger, installed by the command-line tool.

Library modules only call ``logging.getLogger(__name__)``; importing
lampcap configures nothing.  Records go to stderr so that an STL written
to stdout stays clean.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = "lampcap"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Route ``lampcap.*`` records at ``level`` to stderr and, optionally, ``log_file``.

    Calling it again replaces the handlers installed by the previous call.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.debug("logging to %s", ", ".join(type(h).__name__ for h in handlers))
    return logger
