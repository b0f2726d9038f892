from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from viemind.auth_deps import get_current_user
from viemind.config import Settings, get_settings
from viemind.models.user import User
from viemind.schemas.competition import ParticipationWithCompetition
from viemind.schemas.user import UserPublic, UserSummary, ProfileUpdate, SkillCreate
from viemind.services import users as svc
from viemind.services.competitions import user_competitions
from viemind.services.storage import Storage, get_storage

router = APIRouter(prefix="/api/users", tags=["users"])

@router.get("/leaderboard", response_model=list[UserSummary])
async def top_users(
    limit: int | None = Query(default=None, ge=1, le=100),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    return await storage.top_users(limit or settings.top_users_limit)

@router.get("/{user_id}", response_model=UserPublic)
async def get_profile(user_id: UUID, storage: Storage = Depends(get_storage)):
    return await svc.get_user_or_404(storage, user_id)

@router.patch("/{user_id}", response_model=UserPublic)
async def update_profile(
    user_id: UUID,
    payload: ProfileUpdate,
    storage: Storage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    return await svc.update_profile(storage, user, user_id, payload)

@router.post("/{user_id}/skills", response_model=UserPublic)
async def add_skill(
    user_id: UUID,
    payload: SkillCreate,
    storage: Storage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    return await svc.add_skill(storage, user, user_id, payload.skill)

@router.delete("/{user_id}/skills/{skill}", response_model=UserPublic)
async def remove_skill(
    user_id: UUID,
    skill: str,
    storage: Storage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    return await svc.remove_skill(storage, user, user_id, skill)

@router.get("/{user_id}/competitions", response_model=list[ParticipationWithCompetition])
async def competitions_of_user(user_id: UUID, storage: Storage = Depends(get_storage)):
    await svc.get_user_or_404(storage, user_id)
    return await user_competitions(storage, user_id)
