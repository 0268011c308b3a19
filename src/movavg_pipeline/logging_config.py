"""
Logging for the moving average pipeline.

Only the ``movavg_pipeline`` logger tree is configured, so embedding the
pipeline in a host application leaves the host's root handlers alone.
Records go to stderr by default; stdout is reserved for CLI results.
"""
from __future__ import annotations

import logging
import os
import sys
from typing import IO, Literal

PACKAGE_LOGGER = "movavg_pipeline"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_FORMAT_DEV = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_FORMAT_PROD = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
    '"logger": "%(name)s", "message": "%(message)s"}'
)


def setup_logging(
    level: str | None = None,
    environment: Literal["dev", "test", "prod"] = "dev",
    stream: IO[str] | None = None,
) -> logging.Logger:
    """
    Attach a single handler to the package logger.

    Calling it again replaces the previous handler, so the CLI callback can
    run once per invocation.

    Args:
        level: Log level name; falls back to ``LOG_LEVEL`` and then INFO.
        environment: ``prod`` selects JSON-shaped lines, anything else the
            readable format.
        stream: Destination; defaults to the current ``sys.stderr``.
    """
    log_level = level or os.getenv("LOG_LEVEL", "INFO")
    log_format = LOG_FORMAT_PROD if environment == "prod" else LOG_FORMAT_DEV

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(log_format, datefmt=DATE_FORMAT))

    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the package tree when it is not already."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
