from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends
from viemind.auth_deps import require_admin
from viemind.models.user import User
from viemind.schemas.submission import ScoreUpdate, SubmissionPublic
from viemind.services import competitions as svc
from viemind.services.storage import Storage, get_storage

router = APIRouter(prefix="/api/submissions", tags=["submissions"])

@router.patch("/{submission_id}/score", response_model=SubmissionPublic)
async def record_score(
    submission_id: UUID,
    payload: ScoreUpdate,
    storage: Storage = Depends(get_storage),
    admin: User = Depends(require_admin),
):
    return await svc.record_score(storage, submission_id, payload.score, payload.feedback)
