"""Shared fixtures."""

import logging
from typing import Generator

import pytest


@pytest.fixture
def restore_logging() -> Generator[None, None, None]:
    """Undo ``setup_logging`` changes to the root and uvicorn loggers."""
    names = ("", "uvicorn", "uvicorn.error", "uvicorn.access")
    saved = {
        name: (
            logging.getLogger(name).handlers[:],
            logging.getLogger(name).level,
            logging.getLogger(name).propagate,
        )
        for name in names
    }
    yield
    for name, (handlers, level, propagate) in saved.items():
        logger = logging.getLogger(name)
        logger.handlers = handlers
        logger.setLevel(level)
        logger.propagate = propagate
