"""Shared fixtures: in-memory SQLite event store and a request builder."""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from auditsink.domain.schemas.event import AuditEventRequest
from auditsink.infrastructure.database import models  # noqa: F401
from auditsink.infrastructure.database.event_store_db import DbEventStore
from auditsink.infrastructure.database.session import Base, build_session_factory


@pytest.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db_store(session_factory):
    return DbEventStore(session_factory)


def build_request(**overrides) -> AuditEventRequest:
    """Minimal valid submission (the login example); overrides use wire (camelCase) names."""
    body = {
        "producerId": "svc-a",
        "action": "login",
        "outcome": "success",
        "subject": {"type": "user", "id": "u1"},
        "actor": {"id": "u1", "type": "user"},
    }
    body.update(overrides)
    return AuditEventRequest.model_validate(body)


@pytest.fixture
def make_request():
    return build_request
