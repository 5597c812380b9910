"""Logging configuration for aumai-cnab."""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

__all__ = ["LOG_LEVEL_ENV", "get_logger", "setup_logger"]

LOG_LEVEL_ENV = "AUMAI_CNAB_LOG_LEVEL"
_DEFAULT_LEVEL = "WARNING"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(
    name: str, level: str = _DEFAULT_LEVEL, stream: IO[str] | None = None
) -> logging.Logger:
    """
    Set up logger *name* with a single stream handler.

    Logs go to stderr unless *stream* is given, so JSON written to stdout
    stays clean.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")

    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.setLevel(numeric_level)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: str = "aumai_cnab", level: str | None = None) -> logging.Logger:
    """Configure *name* from *level* or the AUMAI_CNAB_LOG_LEVEL environment variable."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, _DEFAULT_LEVEL)
    return setup_logger(name, level)
