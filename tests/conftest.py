"""Shared test fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from errchain.allocator import TrackingAllocator
from errchain.core import ErrorFactory, reset_allocator


@pytest.fixture
def pool() -> TrackingAllocator:
    """Tracked pool so tests can count live blocks."""
    return TrackingAllocator()


@pytest.fixture
def factory(pool: TrackingAllocator) -> ErrorFactory:
    return ErrorFactory(pool)


@pytest.fixture(autouse=True)
def _global_state() -> Iterator[None]:
    """Restore the default allocator and logging setup around every test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    reset_allocator()
    yield
    reset_allocator()
    structlog.reset_defaults()
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
