"""Shared pytest fixtures."""

# Clear settings cache before any imports to prevent stale values between runs
from chat_reports.config import get_settings

get_settings.cache_clear()

import time

import limits.storage.memory
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock


class FakeClock:
    """Manually advanced wall clock for admission-control tests.

    Installed as the ``time`` module of ``limits.storage.memory`` so window
    expiry follows it; everything else falls through to the real module.
    """

    def __init__(self, start: float = 1_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def time(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __getattr__(self, name):
        return getattr(time, name)


@pytest.fixture
def fake_clock(monkeypatch):
    """Create a FakeClock starting at t=1000s and drive ``limits`` with it."""
    clock = FakeClock()
    monkeypatch.setattr(limits.storage.memory, "time", clock)
    return clock


# Database mocking fixtures


@pytest.fixture
def mock_async_session():
    """Create a mock AsyncSession for repository tests."""
    session = AsyncMock()

    # Mock result object for execute
    mock_result = Mock()
    mock_result.scalar_one_or_none = Mock(return_value=None)
    mock_result.scalar_one = Mock(return_value=0)
    mock_result.scalars = Mock(return_value=Mock(all=Mock(return_value=[])))

    session.execute = AsyncMock(return_value=mock_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.add = Mock()

    return session


@pytest.fixture
def make_report():
    """Factory fixture for Report-like rows with UTF-8 byte content."""

    def _make(report_id=1, content="hello world", created_at=None):
        report = Mock()
        report.id = report_id
        report.content = content.encode("utf-8")
        report.created_at = created_at or datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)
        return report

    return _make
