import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
import httpx
import pytest
from httpx import AsyncClient
from viemind.main import app
from helpers import auth, register, register_org, make_admin, create_competition, competition_payload


@pytest.mark.asyncio
async def test_create_competition_requires_organization():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        body = await register(ac)
        r = await ac.post("/api/competitions", headers=auth(body["token"]), json=competition_payload())
        assert r.status_code == 403
        assert r.json() == {"message": "Organization account required"}

        r = await ac.post("/api/competitions", json=competition_payload())
        assert r.status_code == 401


@pytest.mark.asyncio
async def test_create_competition_defaults_and_moderation_flags_ignored():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        owner, org = await register_org(ac)
        ch = await create_competition(ac, owner["token"], is_approved=True, is_featured=True)

        assert ch["organization_id"] == org["id"]
        assert ch["status"] == "upcoming"
        assert ch["runtime_state"] == "upcoming"
        assert ch["is_approved"] is False
        assert ch["is_featured"] is False
        assert ch["participant_count"] == 0
        assert ch["currency"] == "VND"
        assert Decimal(str(ch["prize_amount"])) == Decimal("50000000")

        r = await ac.get(f"/api/competitions/{ch['id']}")
        assert r.status_code == 200
        assert r.json()["title"] == ch["title"]


@pytest.mark.asyncio
async def test_create_competition_date_invariants():
    now = datetime.now(timezone.utc)
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        owner, _ = await register_org(ac)
        hdrs = auth(owner["token"])

        r = await ac.post("/api/competitions", headers=hdrs, json=competition_payload(
            start_date=(now + timedelta(days=5)).isoformat(),
            end_date=(now + timedelta(days=2)).isoformat(),
            submission_deadline=(now + timedelta(days=1)).isoformat(),
        ))
        assert r.status_code == 400
        assert "end_date" in r.json()["message"]

        r = await ac.post("/api/competitions", headers=hdrs, json=competition_payload(
            submission_deadline=(now + timedelta(days=60)).isoformat(),
        ))
        assert r.status_code == 400
        assert "submission_deadline" in r.json()["message"]

        # deadline equal to end_date is allowed
        end = (now + timedelta(days=10)).isoformat()
        r = await ac.post("/api/competitions", headers=hdrs, json=competition_payload(end_date=end, submission_deadline=end))
        assert r.status_code == 201


@pytest.mark.asyncio
async def test_create_competition_rejects_unknown_category():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        owner, _ = await register_org(ac)
        r = await ac.post("/api/competitions", headers=auth(owner["token"]), json=competition_payload(category="Robotics"))
        assert r.status_code == 400
        assert "message" in r.json()


@pytest.mark.asyncio
async def test_get_competition_not_found():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get(f"/api/competitions/{uuid.uuid4()}")
        assert r.status_code == 404
        assert r.json() == {"message": "Competition not found"}


@pytest.mark.asyncio
async def test_list_filters_and_search():
    word = f"kw{uuid.uuid4().hex[:8]}"
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        owner, _ = await register_org(ac)
        nlp = await create_competition(ac, owner["token"], title=f"Sentiment {word}", category="NLP")
        tab = await create_competition(ac, owner["token"], title="House prices", description=f"Tabular regression {word}", category="Tabular")

        r = await ac.get("/api/competitions", params={"search": word.upper()})
        assert r.status_code == 200
        assert [c["id"] for c in r.json()] == [tab["id"], nlp["id"]]  # newest first

        r = await ac.get("/api/competitions", params={"search": word, "category": "Tabular"})
        assert [c["id"] for c in r.json()] == [tab["id"]]

        r = await ac.get("/api/competitions", params={"search": word, "status": "completed"})
        assert r.json() == []

        r = await ac.get("/api/competitions", params={"search": word, "featured": "false"})
        assert len(r.json()) == 2


@pytest.mark.asyncio
async def test_runtime_state_follows_dates():
    now = datetime.now(timezone.utc)
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        owner, _ = await register_org(ac)
        ongoing = await create_competition(
            ac, owner["token"],
            start_date=(now - timedelta(days=1)).isoformat(),
        )
        assert ongoing["runtime_state"] == "ongoing"
        assert ongoing["status"] == "upcoming"

        completed = await create_competition(
            ac, owner["token"],
            start_date=(now - timedelta(days=10)).isoformat(),
            end_date=(now - timedelta(days=1)).isoformat(),
            submission_deadline=(now - timedelta(days=2)).isoformat(),
        )
        assert completed["runtime_state"] == "completed"


@pytest.mark.asyncio
async def test_moderation_is_admin_only_and_drives_featured():
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        owner, _ = await register_org(ac)
        ch = await create_competition(ac, owner["token"])

        r = await ac.patch(f"/api/competitions/{ch['id']}/moderation", headers=auth(owner["token"]), json={"is_featured": True})
        assert r.status_code == 403
        assert r.json() == {"message": "Admin role required"}

        admin = await register(ac, "admin")
        await make_admin(admin["user"]["id"])
        r = await ac.patch(
            f"/api/competitions/{ch['id']}/moderation",
            headers=auth(admin["token"]),
            json={"is_approved": True, "is_featured": True},
        )
        assert r.status_code == 200
        assert r.json()["is_approved"] is True
        assert r.json()["is_featured"] is True

        featured = (await ac.get("/api/competitions/featured", params={"limit": 50})).json()
        assert ch["id"] in [c["id"] for c in featured]
        assert all(c["is_featured"] for c in featured)

        r = await ac.get("/api/competitions/featured", params={"limit": 1})
        assert len(r.json()) == 1

        r = await ac.patch(f"/api/competitions/{ch['id']}/moderation", headers=auth(admin["token"]), json={"status": "cancelled"})
        assert r.json()["status"] == "cancelled"
        assert r.json()["runtime_state"] == "cancelled"

        r = await ac.patch(f"/api/competitions/{uuid.uuid4()}/moderation", headers=auth(admin["token"]), json={"is_featured": True})
        assert r.status_code == 404


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally():
    word = f"kw{uuid.uuid4().hex[:8]}"
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        owner, _ = await register_org(ac)
        literal = await create_competition(ac, owner["token"], title=f"{word} 100% recall_rate")
        await create_competition(ac, owner["token"], title=f"{word} 1000 recallXrate")

        r = await ac.get("/api/competitions", params={"search": f"{word} 100%"})
        assert [c["id"] for c in r.json()] == [literal["id"]]

        r = await ac.get("/api/competitions", params={"search": "recall_rate"})
        assert [c["id"] for c in r.json()] == [literal["id"]]

        r = await ac.get("/api/competitions", params={"search": "%"})
        assert r.json()
        assert all("%" in c["title"] or "%" in c["description"] for c in r.json())

        r = await ac.get("/api/competitions", params={"search": "_"})
        assert all("_" in c["title"] or "_" in c["description"] for c in r.json())
