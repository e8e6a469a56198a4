"""Test fixtures — a fresh in-memory app per test.

Learn: Every test gets its own create_app(storage_backend="memory"), so it
also gets its own MemoryStorage and its own Broadcaster. Nothing leaks
between tests and there is no database to clean up.

HTTP tests talk to the app through httpx's ASGITransport (no server,
no lifespan). WebSocket tests use Starlette's TestClient instead — httpx
can't speak WebSocket — see test_live_updates.py.

The SQL adapter has its own fixtures (db_session) that need a reachable
PostgreSQL at AGORA_DATABASE_URL; those tests skip when it isn't there.
"""

import asyncio
import json

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from starlette.websockets import WebSocketState

from agora.config import settings
from agora.db.models import Base
from agora.main import create_app


class FakeSubscriber:
    """Stands in for a starlette WebSocket on the broadcaster's side."""

    def __init__(self, fail: bool = False):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.fail = fail
        self.sent: list[dict] = []
        # Set stalled=True to model a peer that stops reading: sends hang
        self.stalled = False
        self._never = asyncio.Event()

    async def send_text(self, data: str) -> None:
        if self.fail:
            raise RuntimeError("connection reset by peer")
        if self.stalled:
            await self._never.wait()
        self.sent.append(json.loads(data))

    @property
    def events(self) -> list[dict]:
        """Everything received after the CONNECTED acknowledgment."""
        return [m for m in self.sent if m["type"] != "CONNECTED"]


@pytest.fixture()
def app():
    return create_app(storage_backend="memory")


@pytest.fixture()
def storage(app):
    return app.state.memory_storage


@pytest.fixture()
def broadcaster(app):
    return app.state.broadcaster


@pytest.fixture()
def make_subscriber():
    """Factory for fake subscriber connections."""
    return FakeSubscriber


@pytest_asyncio.fixture()
async def subscriber(broadcaster):
    """A fake live client already registered with the app's broadcaster."""
    sub = FakeSubscriber()
    await broadcaster.register(sub)
    return sub


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client bound to the in-memory app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def question(client):
    """One question created through the API."""
    resp = await client.post("/api/questions", json={
        "title": "How do I read a file line by line?",
        "description": "Looking for the idiomatic way in Python.",
        "tags": "python,files,io",
    })
    assert resp.status_code == 201
    return resp.json()


@pytest_asyncio.fixture()
async def answer(client, question):
    """One answer to `question`, created through the API."""
    resp = await client.post(
        f"/api/questions/{question['id']}/answers",
        json={"answer_text": "Iterate over the open file object."},
    )
    assert resp.status_code == 201
    return resp.json()


# ═══════════════════════════════════════════════════════════
# PostgreSQL (DatabaseStorage tests only)
# ═══════════════════════════════════════════════════════════


@pytest_asyncio.fixture()
async def db_session():
    """Per-test session with automatic rollback via savepoints.

    Learn: The tables are created inside the outer transaction and
    join_transaction_mode="create_savepoint" turns every session.commit()
    into a SAVEPOINT. Rolling back the outer transaction at the end
    removes the tables and all test data.
    """
    engine = create_async_engine(settings.database_url, echo=False)
    try:
        conn = await engine.connect()
    except Exception as e:  # refused, bad credentials, unknown host ...
        await engine.dispose()
        pytest.skip(f"PostgreSQL not reachable: {e}")

    trans = await conn.begin()
    await conn.run_sync(Base.metadata.create_all)
    session = AsyncSession(
        bind=conn,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    try:
        yield session
    finally:
        await session.close()
        await trans.rollback()
        await conn.close()
        await engine.dispose()
