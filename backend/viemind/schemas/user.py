from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime
from viemind.models.user import Role

class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    full_name: str | None = None
    avatar: str | None = None
    points: int = 0

class UserPublic(UserSummary):
    bio: str | None = None
    skills: list[str] = Field(default_factory=list)
    github_url: str | None = None
    linkedin_url: str | None = None
    role: Role
    is_verified: bool
    created_at: datetime
    updated_at: datetime

class UserMe(UserPublic):
    email: str

class ProfileUpdate(BaseModel):
    full_name: str | None = Field(default=None, min_length=2, max_length=100)
    bio: str | None = Field(default=None, max_length=2000)
    avatar: str | None = None
    github_url: str | None = None
    linkedin_url: str | None = None

class SkillCreate(BaseModel):
    skill: str = Field(min_length=1, max_length=50)
