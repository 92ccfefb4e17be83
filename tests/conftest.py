"""
Global pytest fixtures for flexbuf tests.

This module provides:
- Sample payloads shared across test directories
- Configuration isolation (``config`` is a process-wide singleton)
- Debug-level log capture for the "flexbuf" logger
"""

import logging

import pytest

from flexbuf import config


@pytest.fixture
def hello():
    """The payload most buffer tests start from."""
    return b"hello world!"


@pytest.fixture(autouse=True)
def restore_config():
    """Undo any change a test makes to the config singleton."""
    capacity = config.default_initial_capacity
    encoding = config.text_encoding
    yield
    config.default_initial_capacity = capacity
    config.text_encoding = encoding


@pytest.fixture
def debug_log(caplog):
    """caplog recording flexbuf DEBUG records."""
    caplog.set_level(logging.DEBUG, logger="flexbuf")
    return caplog
