import uuid
import httpx
import pytest
from httpx import AsyncClient
from fastapi import status
from viemind.main import app


@pytest.mark.asyncio
async def test_duplicate_email():
    """Registering with a duplicate email returns 409"""
    unique_id = uuid.uuid4().hex[:8]
    email = f"duplicate-{unique_id}@example.com"

    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r1 = await ac.post("/api/auth/register", json={
            "email": email, "username": f"user1_{unique_id}", "password": "password1", "full_name": "First User",
        })
        assert r1.status_code == status.HTTP_201_CREATED

        r2 = await ac.post("/api/auth/register", json={
            "email": email, "username": f"user2_{unique_id}", "password": "password2", "full_name": "Second User",
        })
        assert r2.status_code == 409
        assert r2.json()["message"] == "Email already registered"


@pytest.mark.asyncio
async def test_duplicate_username():
    """Registering with a duplicate username returns 409"""
    unique_id = uuid.uuid4().hex[:8]
    username = f"dupuser_{unique_id}"

    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r1 = await ac.post("/api/auth/register", json={
            "email": f"user1-{unique_id}@example.com", "username": username, "password": "password1", "full_name": "First User",
        })
        assert r1.status_code == status.HTTP_201_CREATED

        r2 = await ac.post("/api/auth/register", json={
            "email": f"user2-{unique_id}@example.com", "username": username, "password": "password2", "full_name": "Second User",
        })
        assert r2.status_code == 409
        assert r2.json()["message"] == "Username already taken"
