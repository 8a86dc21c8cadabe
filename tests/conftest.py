"""Test fixtures — a fresh app and in-memory database per test.

Learn: Testing pattern for async SQLAlchemy + FastAPI:

1. Each test builds its own app from test Settings (create_app(settings)),
   so every test has its own engine, token service and signing secret.
2. The database is in-memory SQLite (aiosqlite + StaticPool): one
   connection shared by all sessions of that engine, gone after the test.
3. httpx's ASGITransport talks to the app in-process, no server needed.

bcrypt rounds are turned down to the minimum so registration is fast.
"""

import os

# Must be set before devtasks.main builds its default app at import time
os.environ.setdefault("DEVTASKS_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DEVTASKS_ENVIRONMENT", "test")
os.environ.setdefault("DEVTASKS_BCRYPT_ROUNDS", "4")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from devtasks.config import Settings
from devtasks.db.engine import create_schema
from devtasks.main import create_app

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET = "test-secret-for-signing-tokens-0123456789"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        database_url=TEST_DB_URL,
        environment="test",
        jwt_secret=TEST_SECRET,
        bcrypt_rounds=4,
        log_level="WARNING",
    )


@pytest_asyncio.fixture()
async def app(settings):
    """App with its schema created. Lifespan doesn't run under ASGITransport."""
    application = create_app(settings)
    await create_schema(application.state.engine)
    try:
        yield application
    finally:
        await application.state.engine.dispose()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def register_and_login(client: AsyncClient, name: str, email: str,
                             password: str = "pw123456") -> dict:
    """Register a user, log in, and return id, token and auth headers."""
    r = await client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert r.status_code == 200, r.text
    r = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    data = r.json()
    return {
        "id": data["userId"],
        "token": data["token"],
        "headers": {"Authorization": f"Bearer {data['token']}"},
    }


@pytest_asyncio.fixture()
async def alice(client):
    return await register_and_login(client, "Alice", "alice@x.com")


@pytest_asyncio.fixture()
async def bob(client):
    return await register_and_login(client, "Bob", "bob@x.com")


@pytest_asyncio.fixture()
async def carol(client):
    return await register_and_login(client, "Carol", "carol@x.com")
