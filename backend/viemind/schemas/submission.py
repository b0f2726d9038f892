from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from uuid import UUID
from datetime import datetime
from viemind.schemas.user import UserSummary


class SubmissionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    participant_id: UUID
    competition_id: UUID
    file_name: str
    file_url: str
    file_size: int | None = None
    score: float | None = None
    is_public: bool
    feedback: str | None = None
    submitted_at: datetime


class LeaderboardParticipant(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    team_name: str | None
    best_score: float | None
    rank: int | None


class LeaderboardRow(BaseModel):
    position: int
    submission: SubmissionPublic
    participant: LeaderboardParticipant
    user: UserSummary


class ScoreUpdate(BaseModel):
    score: float = Field(allow_inf_nan=False)
    feedback: str | None = None
