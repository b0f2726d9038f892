from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
from pathlib import PurePosixPath
import structlog
from viemind.config import Settings
from viemind.models.competition import Competition
from viemind.models.submission import Submission
from viemind.models.user import User, as_utc
from viemind.schemas.competition import (
    CompetitionCreate, CompetitionModeration, CompetitionPublic,
    ParticipantPublic, ParticipantWithUser, ParticipationWithCompetition,
)
from viemind.schemas.submission import SubmissionPublic, LeaderboardParticipant, LeaderboardRow
from viemind.schemas.user import UserSummary
from viemind.services.errors import BadRequest, Conflict, Forbidden, NotFound
from viemind.services.storage import Storage
from viemind.services.uploads import UploadStore, submission_key, public_url

log = structlog.get_logger()


def compute_runtime_state(ch: Competition, now: datetime) -> str:
    if ch.status == "cancelled":
        return "cancelled"
    if now < as_utc(ch.start_date):
        return "upcoming"
    if now <= as_utc(ch.end_date):
        return "ongoing"
    return "completed"


def to_public(ch: Competition, participant_count: int, now: datetime | None = None) -> CompetitionPublic:
    now = now or datetime.now(dt_tz.utc)
    return CompetitionPublic.model_validate(
        {
            **{c.key: getattr(ch, c.key) for c in Competition.__table__.columns},
            "participant_count": participant_count,
            "runtime_state": compute_runtime_state(ch, now),
        }
    )


async def hydrate_public(storage: Storage, rows: list[Competition]) -> list[CompetitionPublic]:
    counts = await storage.participant_counts([c.id for c in rows])
    now = datetime.now(dt_tz.utc)
    return [to_public(c, counts.get(c.id, 0), now) for c in rows]


async def get_competition_or_404(storage: Storage, competition_id: uuid.UUID) -> Competition:
    ch = await storage.get_competition(competition_id)
    if not ch:
        raise NotFound("Competition not found")
    return ch


async def get_competition(storage: Storage, competition_id: uuid.UUID) -> CompetitionPublic:
    ch = await get_competition_or_404(storage, competition_id)
    return (await hydrate_public(storage, [ch]))[0]


async def list_competitions(
    storage: Storage,
    *,
    status: str | None = None,
    category: str | None = None,
    featured: bool | None = None,
    search: str | None = None,
) -> list[CompetitionPublic]:
    rows = await storage.list_competitions(status=status, category=category, featured=featured, search=search)
    return await hydrate_public(storage, rows)


async def featured_competitions(storage: Storage, limit: int) -> list[CompetitionPublic]:
    return await hydrate_public(storage, await storage.featured_competitions(limit))


async def create_competition(storage: Storage, user: User, payload: CompetitionCreate) -> CompetitionPublic:
    org = await storage.get_organization_by_user_id(user.id)
    if not org:
        raise Forbidden("Organization account required")

    start, end, deadline = as_utc(payload.start_date), as_utc(payload.end_date), as_utc(payload.submission_deadline)
    if end <= start:
        raise BadRequest("end_date must be after start_date")
    if deadline > end:
        raise BadRequest("submission_deadline must not be after end_date")

    fields = payload.model_dump()
    fields.update(start_date=start, end_date=end, submission_deadline=deadline)
    ch = await storage.create_competition(org, **fields, is_approved=False, is_featured=False, current_participants=0)
    log.info("competition_created", competition_id=str(ch.id), organization_id=str(org.id))
    return to_public(ch, 0)


async def moderate_competition(storage: Storage, competition_id: uuid.UUID, payload: CompetitionModeration) -> CompetitionPublic:
    ch = await get_competition_or_404(storage, competition_id)
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if updates:
        await storage.update_competition(ch, **updates)
        log.info("competition_moderated", competition_id=str(ch.id), **updates)
    return (await hydrate_public(storage, [ch]))[0]


async def competitions_by_organization(storage: Storage, org_id: uuid.UUID) -> list[CompetitionPublic]:
    if not await storage.get_organization(org_id):
        raise NotFound("Organization not found")
    return await hydrate_public(storage, await storage.competitions_by_organization(org_id))


# --- participation ---

async def join(storage: Storage, user: User, competition_id: uuid.UUID, team_name: str | None = None) -> ParticipantPublic:
    ch = await get_competition_or_404(storage, competition_id)
    if await storage.get_participant(user.id, ch.id):
        raise Conflict("Already participating")
    if ch.max_participants is not None:
        counts = await storage.participant_counts([ch.id])
        if counts.get(ch.id, 0) >= ch.max_participants:
            raise BadRequest("Competition is full")
    p = await storage.create_participant(user.id, ch.id, team_name)
    log.info("competition_joined", competition_id=str(ch.id), participant_id=str(p.id), user_id=str(user.id))
    return ParticipantPublic.model_validate(p)


async def list_participants(storage: Storage, competition_id: uuid.UUID) -> list[ParticipantWithUser]:
    ch = await get_competition_or_404(storage, competition_id)
    rows = await storage.participants_by_competition(ch.id)
    return [
        ParticipantWithUser(**ParticipantPublic.model_validate(p).model_dump(), user=UserSummary.model_validate(u))
        for (p, u) in rows
    ]


async def user_competitions(storage: Storage, user_id: uuid.UUID) -> list[ParticipationWithCompetition]:
    rows = await storage.participants_by_user(user_id)
    publics = await hydrate_public(storage, [c for (_, c) in rows])
    return [
        ParticipationWithCompetition(**ParticipantPublic.model_validate(p).model_dump(), competition=pub)
        for (p, _), pub in zip(rows, publics)
    ]


async def set_disqualified(storage: Storage, competition_id: uuid.UUID, participant_id: uuid.UUID, flag: bool) -> ParticipantPublic:
    p = await storage.get_participant_by_id(participant_id)
    if not p or p.competition_id != competition_id:
        raise NotFound("Participant not found")
    await storage.set_participant(p, is_disqualified=flag)
    log.info("participant_disqualified" if flag else "participant_reinstated", participant_id=str(p.id))
    return ParticipantPublic.model_validate(p)


# --- submissions ---

def _clean_file_name(name: str | None) -> str:
    base = PurePosixPath((name or "").replace("\\", "/")).name.strip()
    return base[:255]


async def submit(
    storage: Storage,
    uploads: UploadStore,
    settings: Settings,
    user: User,
    competition_id: uuid.UUID,
    *,
    file_name: str | None,
    data: bytes | None,
    content_type: str | None = None,
) -> SubmissionPublic:
    participant = await storage.get_participant(user.id, competition_id)
    if not participant:
        raise Forbidden("Not participating in this competition")
    if participant.is_disqualified:
        raise Forbidden("Participant is disqualified")

    name = _clean_file_name(file_name)
    if data is None or not name:
        raise BadRequest("File required")
    if not data:
        raise BadRequest("File is empty")
    if len(data) > settings.max_upload_bytes:
        raise BadRequest(f"File exceeds {settings.max_upload_bytes} bytes")

    key = submission_key(participant.competition_id, participant.id, name)
    uploads.put_bytes(key, data, content_type or "application/octet-stream")

    try:
        sub = await storage.create_submission(participant, file_name=name, file_url=public_url(key), file_size=len(data))
    except Exception:
        # no row points at the stored bytes
        uploads.delete(key)
        log.warning("submission_rolled_back", participant_id=str(participant.id), key=key)
        raise
    log.info("submission_created", submission_id=str(sub.id), participant_id=str(participant.id), size=len(data))
    return SubmissionPublic.model_validate(sub)


async def leaderboard(storage: Storage, competition_id: uuid.UUID, limit: int) -> list[LeaderboardRow]:
    ch = await get_competition_or_404(storage, competition_id)
    rows = await storage.best_submissions(ch.id, limit)
    return [
        LeaderboardRow(
            position=i,
            submission=SubmissionPublic.model_validate(s),
            participant=LeaderboardParticipant.model_validate(p),
            user=UserSummary.model_validate(u),
        )
        for i, (s, p, u) in enumerate(rows, start=1)
    ]


async def record_score(storage: Storage, submission_id: uuid.UUID, score: float, feedback: str | None = None) -> SubmissionPublic:
    sub: Submission | None = await storage.get_submission(submission_id)
    if not sub:
        raise NotFound("Submission not found")
    await storage.set_submission_score(sub, score, feedback)
    log.info("score_recorded", submission_id=str(sub.id), score=score)
    return SubmissionPublic.model_validate(sub)
