from __future__ import annotations
from uuid import UUID
from fastapi import APIRouter, Depends
from viemind.auth_deps import get_current_user
from viemind.models.user import User
from viemind.schemas.competition import CompetitionPublic
from viemind.schemas.organization import OrganizationCreate, OrganizationUpdate, OrganizationPublic
from viemind.services import organizations as svc
from viemind.services.competitions import competitions_by_organization
from viemind.services.storage import Storage, get_storage

router = APIRouter(prefix="/api/organizations", tags=["organizations"])

@router.post("", response_model=OrganizationPublic, status_code=201)
async def create_organization(
    payload: OrganizationCreate,
    storage: Storage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    return await svc.create_organization(storage, user, payload)

@router.get("/{org_id}", response_model=OrganizationPublic)
async def get_organization(org_id: UUID, storage: Storage = Depends(get_storage)):
    return await svc.get_organization_or_404(storage, org_id)

@router.patch("/{org_id}", response_model=OrganizationPublic)
async def update_organization(
    org_id: UUID,
    payload: OrganizationUpdate,
    storage: Storage = Depends(get_storage),
    user: User = Depends(get_current_user),
):
    return await svc.update_organization(storage, user, org_id, payload)

@router.get("/{org_id}/competitions", response_model=list[CompetitionPublic])
async def organization_competitions(org_id: UUID, storage: Storage = Depends(get_storage)):
    return await competitions_by_organization(storage, org_id)
