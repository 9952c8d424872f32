"""Process-wide logging setup used by the command line entry points."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt=DATE_FORMAT, force=True)
    # Request lines are already covered by the API's own log records.
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["configure_logging", "LOG_FORMAT", "DATE_FORMAT"]
