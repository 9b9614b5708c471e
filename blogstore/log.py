"""Logging setup for the blogstore console entry points."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: int | str = logging.INFO) -> None:
    """Attach one stream handler to the ``blogstore`` logger.

    Calling it again only adjusts the level, so entry points and tests can
    both call it without duplicating output.
    """
    logger = logging.getLogger("blogstore")
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
