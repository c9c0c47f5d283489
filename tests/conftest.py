# tests/conftest.py

"""Shared pytest fixtures for all price monitor tests."""

import logging
from collections.abc import Generator

import pytest


@pytest.fixture(autouse=True)
def reset_project_logger() -> Generator[None, None, None]:
    """Detach price_monitor handlers so each test starts clean."""
    yield
    root_logger = logging.getLogger("price_monitor")
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
