"""Shared pytest fixtures for router integration tests."""

import pytest
from contextlib import ExitStack
from typing import AsyncGenerator
from unittest.mock import AsyncMock, Mock, patch

from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from chat_reports.services.admission import AdmissionController, RateLimiter, SlowDown


# Mock database before the app starts to avoid connection issues
@pytest.fixture(autouse=True)
def mock_database_init():
    """Mock database initialization and shutdown for all router tests."""
    with ExitStack() as stack:
        stack.enter_context(patch("chat_reports.main.init_db", new_callable=AsyncMock))
        mock_engine = stack.enter_context(patch("chat_reports.main.engine"))
        mock_engine.dispose = AsyncMock()
        yield mock_engine


@pytest.fixture
def mock_db_session():
    """Create a mock AsyncSession for router tests."""
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def mock_report_repo():
    """Create a mock ReportRepository."""
    repo = AsyncMock()
    repo.create = AsyncMock()
    repo.list_descending_by_time = AsyncMock(return_value=[])
    repo.count = AsyncMock(return_value=0)
    return repo


def make_admission_controller(
    clock,
    *,
    general_limit: int = 100,
    strict_limit: int = 10,
    delay_after: int = 5,
    delay_ms: int = 0,
    window_seconds: int = 900,
    trust_proxy: bool = False,
) -> AdmissionController:
    """Admission controller with production messages and test-sized limits."""
    return AdmissionController(
        slow_down=SlowDown(
            window_seconds=window_seconds,
            delay_after=delay_after,
            delay_ms=delay_ms,
            clock=clock,
        ),
        general=RateLimiter(
            name="general",
            window_seconds=window_seconds,
            limit=general_limit,
            message="Too many requests from this IP, please try again later.",
            clock=clock,
        ),
        strict=RateLimiter(
            name="strict",
            window_seconds=window_seconds,
            limit=strict_limit,
            message="Too many requests to this endpoint, please try again later.",
            clock=clock,
        ),
        trust_proxy=trust_proxy,
    )


@pytest.fixture
def admission_factory(fake_clock):
    """Factory fixture: build a controller on the shared fake clock."""

    def _make(**kwargs):
        return make_admission_controller(fake_clock, **kwargs)

    return _make


@pytest.fixture
def admission_controller(fake_clock):
    """Admission controller without slow-down delays."""
    return make_admission_controller(fake_clock)


def _create_test_client(mock_db_session, mock_report_repo, admission_controller):
    """Build a TestClient with the database and repository overridden.

    The lifespan creates its own admission controller; it is replaced with
    the fixture's controller (fake clock, no delays) once the app has started.
    """
    from chat_reports.main import app
    from chat_reports.database import get_db
    from chat_reports.dependencies import get_report_repository

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield mock_db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_report_repository] = lambda: mock_report_repo

    with TestClient(app, raise_server_exceptions=False) as test_client:
        app.state.admission = admission_controller
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def client(mock_db_session, mock_report_repo, admission_controller):
    """Create TestClient with all infrastructure dependencies overridden."""
    yield from _create_test_client(mock_db_session, mock_report_repo, admission_controller)


@pytest.fixture
def production_settings():
    """Settings stand-in for production mode (no error details)."""
    settings = Mock()
    settings.is_production = True
    settings.is_development = False
    settings.environment = "production"
    return settings
