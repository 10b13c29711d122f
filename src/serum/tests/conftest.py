"""Shared test fixtures for serum tests."""

from __future__ import annotations

from typing import Generator

import pytest

from serum.foundation.config import clear_settings_cache
from serum.observability import MemoryRenderer, NoOpRenderer, configure_logging, reset_logging


@pytest.fixture(autouse=True)
def quiet_logging() -> Generator[None, None, None]:
    """Fresh settings and silent logging for every test."""
    clear_settings_cache()
    configure_logging(level="WARNING", renderer=NoOpRenderer())
    yield
    reset_logging()
    clear_settings_cache()


@pytest.fixture
def captured_logs() -> MemoryRenderer:
    """Record every log entry, debug included."""
    renderer = MemoryRenderer()
    configure_logging(level="DEBUG", renderer=renderer)
    return renderer


@pytest.fixture
def max_depth(monkeypatch: pytest.MonkeyPatch):
    """Set SERUM_MAX_CAUSE_DEPTH for one test."""

    def _set(depth: int) -> None:
        monkeypatch.setenv("SERUM_MAX_CAUSE_DEPTH", str(depth))
        clear_settings_cache()

    return _set
