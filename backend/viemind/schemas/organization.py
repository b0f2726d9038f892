from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime

class OrganizationCreate(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    website: str | None = None
    logo: str | None = None
    description: str | None = None
    industry: str | None = Field(default=None, max_length=120)

class OrganizationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    website: str | None = None
    logo: str | None = None
    description: str | None = None
    industry: str | None = Field(default=None, max_length=120)

class OrganizationPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    website: str | None
    logo: str | None
    description: str | None
    industry: str | None
    is_verified: bool
    created_at: datetime
    updated_at: datetime
