from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Body, UploadFile, File
from viemind.auth_deps import get_current_user, require_admin
from viemind.config import Settings, get_settings
from viemind.models.user import User
from viemind.schemas.competition import (
    Category, CompetitionStatus, CompetitionCreate, CompetitionModeration, CompetitionPublic,
    JoinRequest, ParticipantPublic, ParticipantUpdate, ParticipantWithUser,
)
from viemind.schemas.submission import SubmissionPublic, LeaderboardRow
from viemind.services import competitions as svc
from viemind.services.storage import Storage, get_storage
from viemind.services.uploads import UploadStore, get_upload_store

router = APIRouter(prefix="/api/competitions", tags=["competitions"])

@router.get("", response_model=list[CompetitionPublic])
async def list_competitions(
    status: CompetitionStatus | None = Query(default=None),
    category: Category | None = Query(default=None),
    featured: bool | None = Query(default=None),
    search: str | None = Query(default=None, max_length=200, description="substring of title or description"),
    storage: Storage = Depends(get_storage),
):
    return await svc.list_competitions(storage, status=status, category=category, featured=featured, search=search)

@router.get("/featured", response_model=list[CompetitionPublic])
async def featured_competitions(
    limit: int | None = Query(default=None, ge=1, le=50),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    return await svc.featured_competitions(storage, limit or settings.featured_limit)

@router.get("/{competition_id}", response_model=CompetitionPublic)
async def get_competition(competition_id: UUID, storage: Storage = Depends(get_storage)):
    return await svc.get_competition(storage, competition_id)

@router.post("", response_model=CompetitionPublic, status_code=201)
async def create_competition(
    payload: CompetitionCreate,
    storage: Storage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    return await svc.create_competition(storage, user, payload)

@router.patch("/{competition_id}/moderation", response_model=CompetitionPublic)
async def moderate_competition(
    competition_id: UUID,
    payload: CompetitionModeration,
    storage: Storage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return await svc.moderate_competition(storage, competition_id, payload)

@router.post("/{competition_id}/join", response_model=ParticipantPublic, status_code=201)
async def join_competition(
    competition_id: UUID,
    body: JoinRequest | None = Body(default=None),
    storage: Storage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    return await svc.join(storage, user, competition_id, body.team_name if body else None)

@router.get("/{competition_id}/participants", response_model=list[ParticipantWithUser])
async def list_participants(competition_id: UUID, storage: Storage = Depends(get_storage)):
    return await svc.list_participants(storage, competition_id)

@router.patch("/{competition_id}/participants/{participant_id}", response_model=ParticipantPublic)
async def update_participant(
    competition_id: UUID,
    participant_id: UUID,
    payload: ParticipantUpdate,
    storage: Storage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return await svc.set_disqualified(storage, competition_id, participant_id, payload.is_disqualified)

@router.post("/{competition_id}/submit", response_model=SubmissionPublic, status_code=201)
async def submit(
    competition_id: UUID,
    file: UploadFile | None = File(default=None, description="prediction file"),
    storage: Storage = Depends(get_storage),
    uploads: UploadStore = Depends(get_upload_store),
    settings: Settings = Depends(get_settings),
    user: User = Depends(get_current_user),
):
    data = None
    if file is not None:
        # one byte past the limit is enough to reject
        data = await file.read(settings.max_upload_bytes + 1)
    return await svc.submit(
        storage, uploads, settings, user, competition_id,
        file_name=file.filename if file else None,
        data=data,
        content_type=file.content_type if file else None,
    )

@router.get("/{competition_id}/leaderboard", response_model=list[LeaderboardRow])
async def leaderboard(
    competition_id: UUID,
    limit: int | None = Query(default=None, ge=1, le=100),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    return await svc.leaderboard(storage, competition_id, limit or settings.leaderboard_limit)
