"""Shared pytest fixtures configured to use SQLite in-memory for unit tests."""

import logging
import os
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Tell app lifespan to skip real DB init
os.environ.setdefault("NOTECOLLAB_SKIP_LIFESPAN_DB", "1")

from src.notecollab.core.locks import KeyedLocks
from src.notecollab.core.models import BaseModel, Note, User
from src.notecollab.database import get_db_session
from src.notecollab.main import app
from src.notecollab.security.jwt import create_access_token

# Silence extremely verbose DEBUG logs from aiosqlite to keep test output readable
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


@pytest.fixture
async def test_engine():
    """SQLite in-memory engine with a fresh schema per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,  # keep the same memory DB across connections
        connect_args={"check_same_thread": False},
    )

    # SQLite only enforces CASCADE / SET NULL with foreign keys on
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ANN001
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_session(session_factory):
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()


@pytest.fixture
def note_locks():
    """Private lock registry so tests never share state with each other."""
    return KeyedLocks()


async def _make_user(session, username, full_name=None):
    user = User(username=username, full_name=full_name, is_active=True)
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user


@pytest.fixture
async def owner(test_session):
    return await _make_user(test_session, f"owner_{uuid4().hex[:8]}", "Olivia Owner")


@pytest.fixture
async def collaborator(test_session):
    return await _make_user(test_session, f"collab_{uuid4().hex[:8]}", "Casey Collaborator")


@pytest.fixture
async def stranger(test_session):
    return await _make_user(test_session, f"stranger_{uuid4().hex[:8]}")


@pytest.fixture
async def note(test_session, owner):
    """A note with title "T" and body "B" and an empty ledger."""
    note = Note(title="T", content="B", tags=["work"], owner_id=owner.id, last_edited_by_id=owner.id)
    test_session.add(note)
    await test_session.commit()
    return note


def auth_headers_for(user) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers(owner):
    return auth_headers_for(owner)


@pytest.fixture
def collaborator_headers(collaborator):
    return auth_headers_for(collaborator)


@pytest.fixture
def stranger_headers(stranger):
    return auth_headers_for(stranger)


@pytest.fixture
def test_app(test_session):
    """App whose DB dependency yields the test session."""

    async def _override_get_db():
        yield test_session

    app.dependency_overrides[get_db_session] = _override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def api_client(test_app):
    """Async client running the app on the test's own event loop."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
