"""Health endpoint tests."""

import pytest
from httpx import ASGITransport, AsyncClient

from devtasks import __version__
from devtasks.main import create_app


@pytest.mark.asyncio
async def test_health_returns_ok(client):
    """Health endpoint is open and reports the database as reachable."""
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["server"] == "ok"
    assert data["database"] == "ok"
    assert data["version"] == __version__


@pytest.mark.asyncio
async def test_health_degraded_hides_driver_error(settings):
    """An unreachable database reports "error" without echoing the driver message."""
    broken = settings.model_copy(
        update={"database_url": "sqlite+aiosqlite:////nonexistent-devtasks-dir/db.sqlite"}
    )
    app = create_app(broken)
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            resp = await ac.get("/api/health")
    finally:
        await app.state.engine.dispose()

    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "degraded"
    assert data["database"] == "error"
    assert "nonexistent-devtasks-dir" not in resp.text
