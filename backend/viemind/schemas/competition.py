from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Literal
from uuid import UUID
from datetime import datetime
from decimal import Decimal
from viemind.schemas.user import UserSummary

Category = Literal["Computer Vision", "NLP", "Tabular", "Other"]
CompetitionStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]

class CompetitionCreate(BaseModel):
    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=1)
    category: Category
    tags: list[str] = Field(default_factory=list)
    prize_amount: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    currency: str = Field(default="VND", min_length=3, max_length=8)
    start_date: datetime
    end_date: datetime
    submission_deadline: datetime
    is_public: bool = True
    max_participants: int | None = Field(default=None, ge=1)
    evaluation_metric: str | None = Field(default=None, max_length=64)
    dataset_url: str | None = None
    rules: str | None = None
    status: CompetitionStatus = "upcoming"
    # is_approved / is_featured are not accepted here; moderation sets them

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v: list[str]):
        return [t.strip() for t in v if t.strip()]

class CompetitionModeration(BaseModel):
    is_approved: bool | None = None
    is_featured: bool | None = None
    status: CompetitionStatus | None = None

class CompetitionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    title: str
    description: str
    category: Category
    tags: list[str]
    prize_amount: Decimal | None
    currency: str
    start_date: datetime
    end_date: datetime
    submission_deadline: datetime
    is_public: bool
    is_approved: bool
    is_featured: bool
    max_participants: int | None
    evaluation_metric: str | None
    dataset_url: str | None
    rules: str | None
    status: CompetitionStatus
    created_at: datetime
    updated_at: datetime
    # derived at read time
    participant_count: int
    runtime_state: CompetitionStatus

class JoinRequest(BaseModel):
    team_name: str | None = Field(default=None, max_length=120)

class ParticipantPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    competition_id: UUID
    team_name: str | None
    joined_at: datetime
    last_submission_at: datetime | None
    best_score: float | None
    rank: int | None
    is_disqualified: bool

class ParticipantUpdate(BaseModel):
    is_disqualified: bool

class ParticipantWithUser(ParticipantPublic):
    user: UserSummary

class ParticipationWithCompetition(ParticipantPublic):
    competition: CompetitionPublic
