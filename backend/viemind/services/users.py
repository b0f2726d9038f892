from __future__ import annotations
import uuid
import structlog
from viemind.models.user import User
from viemind.schemas.user import ProfileUpdate
from viemind.services.errors import Forbidden, NotFound
from viemind.services.storage import Storage

log = structlog.get_logger()


async def get_user_or_404(storage: Storage, user_id: uuid.UUID) -> User:
    user = await storage.get_user(user_id)
    if not user:
        raise NotFound("User not found")
    return user


def _ensure_self(acting: User, user_id: uuid.UUID) -> None:
    if acting.id != user_id:
        raise Forbidden("Cannot modify another user's profile")


async def update_profile(storage: Storage, acting: User, user_id: uuid.UUID, payload: ProfileUpdate) -> User:
    _ensure_self(acting, user_id)
    # only fields the client actually sent
    updates = payload.model_dump(exclude_unset=True)
    if updates:
        await storage.update_user(acting, **updates)
        log.info("profile_updated", user_id=str(acting.id), fields=sorted(updates))
    return acting


async def add_skill(storage: Storage, acting: User, user_id: uuid.UUID, skill: str) -> User:
    _ensure_self(acting, user_id)
    skill = skill.strip()
    skills = list(acting.skills or [])
    if skill and skill not in skills:
        await storage.update_user(acting, skills=[*skills, skill])
    return acting


async def remove_skill(storage: Storage, acting: User, user_id: uuid.UUID, skill: str) -> User:
    _ensure_self(acting, user_id)
    skills = list(acting.skills or [])
    if skill not in skills:
        raise NotFound("Skill not found")
    await storage.update_user(acting, skills=[s for s in skills if s != skill])
    return acting
