#!/usr/bin/env python3

import logging
import os
import sys

ROOT_LOGGER_NAME = "gitai"


class CliFormatter(logging.Formatter):
    """Prints informational messages bare and prefixes everything louder with its level."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.WARNING:
            return f"{record.levelname} {message}"
        return message


def configure_logging(level: str = None) -> logging.Logger:
    """
    Attaches the console handler to the gitai logger.

    Args:
        level: Log level name; defaults to GITAI_LOG_LEVEL or INFO. Unknown names fall back to INFO

    Returns:
        The configured root gitai logger
    """
    requested = (level or os.environ.get("GITAI_LOG_LEVEL", "INFO")).upper()
    # getLevelName returns a string for names it does not know
    resolved = logging.getLevelName(requested)
    unknown = not isinstance(resolved, int)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.INFO if unknown else resolved)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(CliFormatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False

    if unknown:
        logger.warning(f"Unknown log level '{requested}', using INFO")
    return logger


def get_logger(name: str) -> logging.Logger:
    """Returns a logger nested under the gitai logger."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
