"""Logging setup for the pnlkit command line."""

import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a single stderr handler to the pnlkit logger.

    Calling this again replaces the handler instead of adding another one.

    Args:
        level: Level name such as "DEBUG" or "INFO"

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("pnlkit")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
