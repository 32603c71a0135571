"""Test configuration for gstbook tests."""

import os
import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

# Use an in-memory SQLite database unless a URL is supplied explicitly.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")

import gstbook.app.db as app_db  # noqa: E402
from gstbook.app.repos_sqlalchemy import businesses_repo_sql  # noqa: E402
from gstbook.app.schemas import BusinessCreate  # noqa: E402

app_db.SessionLocal, app_db.engine = app_db.create_test_session()


@pytest.fixture
def session_factory():
    factory, engine = app_db.create_test_session()
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_business(db):
    def _make(state: str = "Delhi", prefix: str = "INV", **kwargs):
        payload = BusinessCreate(
            name=kwargs.pop("name", "Acme Traders"),
            state=state,
            invoice_prefix=prefix,
            **kwargs,
        )
        return businesses_repo_sql.create_business(db, payload)

    return _make


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient

    from gstbook.app.main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_db.get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
