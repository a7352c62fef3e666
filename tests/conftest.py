"""
Pytest configuration and shared fixtures for repart tests.
"""

import pytest
from loguru import logger

from repart import Pattern


@pytest.fixture(autouse=True)
def _debug_tracing_off(monkeypatch):
    """Keep transformation tracing off unless a test turns it on."""
    monkeypatch.delenv("REPART_DEBUG", raising=False)


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test, at DEBUG and above."""
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]),
        level="DEBUG",
        format="{message}",
    )
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def int_pattern() -> Pattern:
    """Signed integer with the digits converted to int."""
    return Pattern(r"(?P<raw>[+-]?(?P<value>\d+))", transformations={"value": int})
