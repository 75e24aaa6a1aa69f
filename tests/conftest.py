"""
Shared fixtures for the resultrail test suite.

Settings are cached per process and structlog is global state; both are
reset after every test so environment tweaks and log captures stay local.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from resultrail.config import get_settings


@pytest.fixture(autouse=True)
def _isolate_global_state() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture()
def stack_traces(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable StackTrace tags on ExceptionError for one test."""
    monkeypatch.setenv("RESULTRAIL_CAPTURE_STACK_TRACE", "true")
    get_settings.cache_clear()
