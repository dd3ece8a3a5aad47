"""Central logging configuration for the calendar service."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Third-party loggers that are noisy at INFO.
_QUIET_LOGGERS = ("uvicorn.access", "httpx")


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once and quiet chatty third-party loggers.

    Unknown level names fall back to INFO.
    """
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO

    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    logging.getLogger().setLevel(resolved)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured at %s", logging.getLevelName(resolved)
    )
