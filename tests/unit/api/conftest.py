"""Fixtures for API unit tests: SQLite-backed app, fresh metrics, AsyncClient."""

import pytest
from httpx import ASGITransport, AsyncClient

from auditsink.api import dependencies
from auditsink.infrastructure.database.session import get_session_factory
from auditsink.main import app
from auditsink.observability.metrics import MetricsCollector


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def app_with_overrides(session_factory, metrics):
    """App with the session factory and metrics overridden for testing."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[dependencies.get_metrics] = lambda: metrics
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(app_with_overrides):
    """Async HTTP client for testing; uses overridden app."""
    transport = ASGITransport(app=app_with_overrides)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def login_body():
    return {
        "producerId": "svc-a",
        "action": "login",
        "outcome": "success",
        "subject": {"type": "user", "id": "u1"},
        "actor": {"id": "u1", "type": "user"},
        "correlationId": "corr-1",
    }
