import httpx
import pytest
from httpx import AsyncClient
from viemind import db
from viemind.main import app


@pytest.mark.asyncio
async def test_health_ok():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert data["database"] == "ok"
    assert data["request_id"] == "req-123"
    assert r.headers["X-Request-ID"] == "req-123"


@pytest.mark.asyncio
async def test_version_ok():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/version")
    assert r.status_code == 200
    data = r.json()
    assert "version" in data and "git_sha" in data


@pytest.mark.asyncio
async def test_unknown_route_uses_message_body():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/api/nope")
    assert r.status_code == 404
    assert "message" in r.json()


@pytest.mark.asyncio
async def test_health_reports_database_down(monkeypatch):
    async def unreachable():
        raise OSError("connection refused")

    monkeypatch.setattr(db, "ping", unreachable)
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/health")
    assert r.status_code == 503
    assert r.json()["status"] == "degraded"
    assert r.json()["database"] == "down"
