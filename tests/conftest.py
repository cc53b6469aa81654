import io

import pytest
from loguru import logger
from rich.console import Console


@pytest.fixture
def console() -> Console:
    """Rich console that renders into memory instead of the terminal."""
    return Console(file=io.StringIO(), force_terminal=False, width=120)


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
