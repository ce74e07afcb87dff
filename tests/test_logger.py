import logging
import os

from app.core.logger import LOG_DIR, get_logger


def test_logger_uses_environment_level_and_dir():
    logger = get_logger("logger_check")

    assert logger.level == logging.WARNING
    assert logger.propagate is False
    assert os.path.isfile(os.path.join(LOG_DIR, "logger_check.log"))


def test_logger_handlers_are_added_once():
    first = get_logger("logger_reuse")
    second = get_logger("logger_reuse")

    assert first is second
    assert len(second.handlers) == 2
