"""Logging setup for the Strata command line."""

from __future__ import annotations

import logging

LOG_FORMAT = "[%(asctime)s][%(levelname)s][%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def init_logging(level: str) -> None:
    """Route ``strata`` loggers to stderr at *level*."""

    level_name = (level or "").strip().upper()
    resolved = logging.getLevelNamesMapping().get(level_name)
    if resolved is None:
        raise ValueError(f"Invalid logging level: {level}")

    package_logger = logging.getLogger("strata")
    package_logger.setLevel(resolved)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(resolved)
    stream_handler.setFormatter(formatter)
    package_logger.addHandler(stream_handler)


__all__ = ["init_logging"]
