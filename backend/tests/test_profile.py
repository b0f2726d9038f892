import uuid
import httpx
import pytest
from httpx import AsyncClient
from viemind.main import app
from helpers import auth, register


@pytest.mark.asyncio
async def test_update_profile_is_partial():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        me = await register(ac)
        uid = me["user"]["id"]

        r = await ac.patch(f"/api/users/{uid}", headers=auth(me["token"]), json={"bio": "x"})
        assert r.status_code == 200

        fetched = (await ac.get(f"/api/users/{uid}")).json()
        assert fetched["bio"] == "x"
        assert fetched["full_name"] == me["user"]["full_name"]
        assert fetched["username"] == me["user"]["username"]
        assert fetched["github_url"] is None
        assert "email" not in fetched
        assert "password_hash" not in fetched

        r = await ac.patch(f"/api/users/{uid}", headers=auth(me["token"]), json={"github_url": "https://github.com/vm"})
        assert r.json()["bio"] == "x"
        assert r.json()["github_url"] == "https://github.com/vm"


@pytest.mark.asyncio
async def test_cannot_update_someone_else():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        me, other = await register(ac), await register(ac)
        r = await ac.patch(f"/api/users/{other['user']['id']}", headers=auth(me["token"]), json={"bio": "hijack"})
        assert r.status_code == 403
        assert r.json() == {"message": "Cannot modify another user's profile"}

        r = await ac.post(f"/api/users/{other['user']['id']}/skills", headers=auth(me["token"]), json={"skill": "NLP"})
        assert r.status_code == 403

        r = await ac.patch(f"/api/users/{other['user']['id']}", json={"bio": "anon"})
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_skills_are_deduplicated_and_removable():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        me = await register(ac)
        uid, hdrs = me["user"]["id"], auth(me["token"])

        for skill in ["Python", "PyTorch", "Python", " SQL "]:
            r = await ac.post(f"/api/users/{uid}/skills", headers=hdrs, json={"skill": skill})
            assert r.status_code == 200
        assert r.json()["skills"] == ["Python", "PyTorch", "SQL"]

        r = await ac.delete(f"/api/users/{uid}/skills/PyTorch", headers=hdrs)
        assert r.status_code == 200
        assert r.json()["skills"] == ["Python", "SQL"]

        r = await ac.delete(f"/api/users/{uid}/skills/Rust", headers=hdrs)
        assert r.status_code == 404
        assert r.json() == {"message": "Skill not found"}


@pytest.mark.asyncio
async def test_get_user_and_top_users():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        await register(ac)
        r = await ac.get(f"/api/users/{uuid.uuid4()}")
        assert r.status_code == 404
        assert r.json() == {"message": "User not found"}

        r = await ac.get("/api/users/leaderboard", params={"limit": 3})
        assert r.status_code == 200
        top = r.json()
        assert 1 <= len(top) <= 3
        points = [u["points"] for u in top]
        assert points == sorted(points, reverse=True)
        assert all("email" not in u for u in top)

        r = await ac.get(f"/api/users/{uuid.uuid4()}/competitions")
        assert r.status_code == 404
