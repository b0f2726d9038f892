from __future__ import annotations
import uuid
from typing import assert_never
import structlog
from viemind.models.organization import Organization
from viemind.models.user import User, Role
from viemind.schemas.organization import OrganizationCreate, OrganizationUpdate
from viemind.services.errors import Conflict, Forbidden, NotFound
from viemind.services.storage import Storage

log = structlog.get_logger()


def role_after_hosting(role: Role) -> Role:
    match role:
        case Role.USER | Role.ORGANIZATION:
            return Role.ORGANIZATION
        case Role.ADMIN:
            return Role.ADMIN
        case _:
            assert_never(role)


async def create_organization(storage: Storage, owner: User, payload: OrganizationCreate) -> Organization:
    if await storage.get_organization_by_user_id(owner.id):
        raise Conflict("User already has an organization")
    org = await storage.create_organization(owner, promote_to=role_after_hosting(owner.role), **payload.model_dump())
    log.info("organization_created", organization_id=str(org.id), user_id=str(owner.id))
    return org


async def get_organization_or_404(storage: Storage, org_id: uuid.UUID) -> Organization:
    org = await storage.get_organization(org_id)
    if not org:
        raise NotFound("Organization not found")
    return org


async def update_organization(storage: Storage, acting: User, org_id: uuid.UUID, payload: OrganizationUpdate) -> Organization:
    org = await get_organization_or_404(storage, org_id)
    if org.user_id != acting.id:
        raise Forbidden("Only the owner can update this organization")
    updates = payload.model_dump(exclude_unset=True)
    if updates:
        await storage.update_organization(org, **updates)
    return org
