"""
Shared pytest fixtures.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def reset_minilang_logger():
    """Leave the package logger as it was found."""
    logger = logging.getLogger("minilang")
    handlers, level = logger.handlers[:], logger.level
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
