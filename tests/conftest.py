"""
Shared test fixtures.

Every test gets its own in-memory SQLite store (via aiosqlite) and its
own broadcaster, so nothing leaks between tests.  The rate limiter is
switched off for the duration of each test.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from rideflow.api.app import create_app
from rideflow.api.middleware import limiter
from rideflow.infrastructure.database import EntityStore
from rideflow.realtime.broadcaster import Broadcaster


class FakeConnection:
    """Stands in for a websocket: records every JSON message it is sent."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(data)


@pytest.fixture(autouse=True)
def _no_rate_limit():
    previous = limiter.enabled
    limiter.enabled = False
    yield
    limiter.enabled = previous


@pytest_asyncio.fixture
async def store() -> AsyncGenerator[EntityStore, None]:
    """Create tables, yield the store, then drop everything."""
    store = EntityStore("sqlite+aiosqlite:///:memory:")
    await store.create_all()
    yield store
    await store.drop_all()
    await store.dispose()


@pytest_asyncio.fixture
async def db_session(store: EntityStore) -> AsyncGenerator[AsyncSession, None]:
    async with store.session() as session:
        yield session


@pytest.fixture
def broadcaster() -> Broadcaster:
    return Broadcaster()


@pytest_asyncio.fixture
async def client(store: EntityStore, broadcaster: Broadcaster):
    """AsyncClient bound to an app that shares the test store and broadcaster."""
    app = create_app(store=store, broadcaster=broadcaster)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ── Helpers ───────────────────────────────────────────────────────────


async def register_user(client: AsyncClient, **overrides) -> dict:
    body = {
        "username": "alice",
        "email": "alice@rideflow.io",
        "password": "secret123",
        "fullName": "Alice Rider",
        "phone": "9810000001",
        "userType": "rider",
    }
    body.update(overrides)
    resp = await client.post("/api/auth/register", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()["user"]


async def register_driver(client: AsyncClient, **overrides) -> dict:
    body = {
        "fullName": "Dan Driver",
        "email": "dan@rideflow.io",
        "phone": "9810000099",
        "password": "secret123",
        "licenseNumber": "MH01-2020-1234",
        "vehicleType": "sedan",
        "vehicleModel": "Maruti Dzire",
        "vehiclePlate": "MH01AB1234",
    }
    body.update(overrides)
    resp = await client.post("/api/drivers/register", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()
