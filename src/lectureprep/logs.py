"""Logging setup for the CLI."""

from __future__ import annotations

import logging

LOGGER_NAME = "lectureprep"


def setup_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """Configure the package logger once and return it."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False

    return logger
