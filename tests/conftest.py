"""Pytest configuration and fixtures for mqdepth testing."""

import sys

import pytest
from loguru import logger

from mqdepth.core.accumulator import MemoryAccumulator
from tests.fake_redis import FakeNetwork


@pytest.fixture
def network() -> FakeNetwork:
    """A fake network with no servers; tests add what they need."""
    return FakeNetwork()


@pytest.fixture
def accumulator() -> MemoryAccumulator:
    return MemoryAccumulator()


@pytest.fixture(autouse=True)
def restore_logger():
    """Undo handler changes made by logging and CLI tests."""
    yield
    logger.remove()
    logger.add(sys.stderr)
