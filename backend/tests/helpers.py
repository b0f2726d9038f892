import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy import update
from viemind.db import SessionLocal
from viemind.models.user import User, Role


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


async def register(ac, prefix: str = "user") -> dict:
    """Register a fresh user; returns the AuthResponse body."""
    uid = uuid.uuid4().hex[:8]
    r = await ac.post("/api/auth/register", json={
        "email": f"{prefix}-{uid}@example.com",
        "username": f"{prefix}_{uid}",
        "password": "supersecret",
        "full_name": f"{prefix.title()} Tester",
    })
    assert r.status_code == 201, r.text
    return r.json()


async def make_admin(user_id: str) -> None:
    async with SessionLocal() as session:
        await session.execute(update(User).where(User.id == uuid.UUID(user_id)).values(role=Role.ADMIN))
        await session.commit()


async def register_org(ac, name: str = "Test Lab") -> tuple[dict, dict]:
    """Register a user and give them an organization; returns (auth body, organization)."""
    body = await register(ac, "org")
    r = await ac.post("/api/organizations", headers=auth(body["token"]), json={"name": name, "industry": "Research"})
    assert r.status_code == 201, r.text
    return body, r.json()


def competition_payload(**overrides) -> dict:
    now = datetime.now(timezone.utc)
    payload = {
        "title": "Vietnamese Sentiment Analysis",
        "description": "Classify the sentiment of Vietnamese product reviews.",
        "category": "NLP",
        "tags": ["nlp", "vietnamese"],
        "prize_amount": "50000000",
        "start_date": (now + timedelta(days=1)).isoformat(),
        "end_date": (now + timedelta(days=30)).isoformat(),
        "submission_deadline": (now + timedelta(days=29)).isoformat(),
        "evaluation_metric": "f1",
    }
    payload.update(overrides)
    return payload


async def create_competition(ac, token: str, **overrides) -> dict:
    r = await ac.post("/api/competitions", headers=auth(token), json=competition_payload(**overrides))
    assert r.status_code == 201, r.text
    return r.json()
