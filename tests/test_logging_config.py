"""Tests for oauthflow.logging_config.setup_logging."""

from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from oauthflow.logging_config import LOGGER_NAME, setup_logging


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger(LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers, logger.level, logger.propagate = saved[0], saved[1], saved[2]


@pytest.mark.parametrize(
    ("verbose", "quiet", "level"),
    [
        (False, False, logging.WARNING),
        (True, False, logging.DEBUG),
        (False, True, logging.ERROR),
        (True, True, logging.DEBUG),
    ],
)
def test_levels(verbose: bool, quiet: bool, level: int) -> None:
    logger = setup_logging(verbose=verbose, quiet=quiet)
    assert logger.level == level
    assert logger.propagate is False


def test_single_rich_handler_after_repeated_setup() -> None:
    setup_logging()
    logger = setup_logging()
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)
