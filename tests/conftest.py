"""
Shared test fixtures for the railbridge test suite.

Provides a mocked ErrorLogger (the adapters take their logger as a
constructor argument) and resets structlog's global configuration so
tests that call configure_logging don't leak into each other.
"""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
import structlog

from railbridge.logger import ErrorLogger


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Restore structlog defaults after every test."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def mock_logger() -> MagicMock:
    """A stand-in ErrorLogger recording every call."""
    return MagicMock(spec=ErrorLogger)
