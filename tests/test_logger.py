from __future__ import annotations

import logging
from dataclasses import replace

from frontdesk.utils.config import get_settings
from frontdesk.utils.logger import configure_logging, get_logger


def test_get_logger_returns_named_logger() -> None:
    logger = get_logger("frontdesk.tests")
    assert logger.name == "frontdesk.tests"


def test_injected_settings_set_root_level() -> None:
    get_logger("frontdesk.tests")
    root = logging.getLogger()
    previous = root.level
    get_settings.cache_clear()
    try:
        configure_logging(replace(get_settings(), log_level="debug"))
        assert root.level == logging.DEBUG
        configure_logging(replace(get_settings(), log_level="WARNING"))
        assert root.level == logging.WARNING
    finally:
        root.setLevel(previous)
