import logging

import pytest

from strata.logs import LOG_FORMAT, init_logging


@pytest.fixture
def restore_strata_logger():
    logger = logging.getLogger("strata")
    handlers = list(logger.handlers)
    level = logger.level
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_init_logging_installs_single_handler(restore_strata_logger):
    init_logging("debug")
    init_logging("INFO")

    logger = restore_strata_logger
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT


def test_init_logging_rejects_unknown_level(restore_strata_logger):
    with pytest.raises(ValueError):
        init_logging("chatty")
