"""
Shared fixtures: an in-memory SQLite database, a session on it, an
account factory and a TestClient wired to the same database.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from socialnet.db import create_db_engine, get_db
from socialnet.main import app
from socialnet.models import Base
from socialnet.services import accounts


@pytest.fixture
def engine():
    """In-memory SQLite engine; StaticPool keeps one connection so every session sees the same data."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def make_account(db):
    """Create accounts in the test session: make_account("alice", is_admin=True)."""
    counter = iter(range(1, 100000))

    def _make(handle=None, **kwargs):
        handle = handle or f"user{next(counter)}"
        return accounts.create_account(db, handle, f"{handle}@example.com", **kwargs)

    return _make


@pytest.fixture
def client(session_factory):
    """TestClient whose requests run against the in-memory database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def create_account(session_factory):
    """Create and commit an account outside any request; returns its id."""

    def _create(handle, is_admin=False, **kwargs):
        session = session_factory()
        try:
            account = accounts.create_account(session, handle, f"{handle}@example.com", is_admin=is_admin, **kwargs)
            session.commit()
            return account.id
        finally:
            session.close()

    return _create
