"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from frontdesk.utils.config import Settings, get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_LOGGER_INITIALIZED = False


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install the stdout handler once and apply the level from ``settings``.

    Module loggers are requested at import time with the environment settings;
    ``create_app`` calls this again with the injected settings, which only
    updates the root level.
    """

    global _LOGGER_INITIALIZED
    resolved = settings or get_settings()
    level = resolved.log_level.upper()

    if not _LOGGER_INITIALIZED:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stdout)
        _LOGGER_INITIALIZED = True
        return
    if settings is not None:
        logging.getLogger().setLevel(level)


def get_logger(name: str) -> logging.Logger:
    if not _LOGGER_INITIALIZED:
        configure_logging()
    return logging.getLogger(name)
