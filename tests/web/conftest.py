"""Web test fixtures: TestClient with shared in-memory SQLite."""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from societybills.repositories.sqlalchemy import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyBillingConfigRepository,
)
from tests.conftest import _sample_config, apply_schema

ADMIN_HEADERS = {"X-Actor-Id": "admin-1", "X-Actor-Name": "Asha Admin", "X-Actor-Role": "society_admin"}
EDITOR_HEADERS = {"X-Actor-Id": "editor-1", "X-Actor-Name": "Ravi", "X-Actor-Role": "admin"}
RESIDENT_HEADERS = {"X-Actor-Id": "u1", "X-Actor-Role": "owner"}


def _make_test_engine():
    """Create a fresh in-memory SQLite engine with shared connection pool."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.connect() as conn:
        apply_schema(conn)
    return engine


def create_config_in_db(engine, **overrides):
    """Store a billing config directly. Shared helper for web route tests."""
    with engine.connect() as conn:
        return SQLAlchemyBillingConfigRepository(conn).create(_sample_config(**overrides))


def get_audit_logs(engine, society_id="soc-1", event_type=None):
    """Query audit_logs from the test DB. Optionally filter by event_type."""
    with engine.connect() as conn:
        logs = SQLAlchemyAuditLogRepository(conn).list_by_society(society_id, limit=100)
    if event_type:
        logs = [log for log in logs if log.event_type == event_type]
    return logs


@pytest.fixture(autouse=True)
def web_test_db(monkeypatch):
    """Set up in-memory DB and patch the web app to use it."""
    engine = _make_test_engine()

    import web.deps as deps_module

    monkeypatch.setattr(deps_module, "get_engine", lambda: engine)

    import web.app as app_module

    monkeypatch.setattr(app_module, "initialize_db", lambda: None)

    yield engine

    engine.dispose()


@pytest.fixture()
def test_engine(web_test_db):
    """Expose the test engine for helpers that need direct DB access."""
    return web_test_db


@pytest.fixture()
def client():
    from starlette.testclient import TestClient

    from web.app import app

    return TestClient(app, raise_server_exceptions=False)
