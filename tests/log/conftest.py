"""Fixtures for logging tests."""

import pytest


@pytest.fixture(autouse=True)
def restore_flexbuf_logger(monkeypatch):
    """Keep handler/level changes made by setup_logging() inside one test."""
    from flexbuf._logging import logger

    # setenv first so teardown also removes a value setup_logging() writes
    monkeypatch.setenv("FLEXBUF_LOG_FORMAT", "human")
    monkeypatch.delenv("FLEXBUF_LOG_FORMAT")
    handlers = logger.handlers[:]
    level = logger.level
    yield
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
