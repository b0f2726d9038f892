from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
from typing import Any
from fastapi import Depends
from sqlalchemy import select, func, update, delete, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from viemind.db import get_session
from viemind.models.user import User, AuthSession, as_utc
from viemind.models.organization import Organization
from viemind.models.competition import Competition, Participant
from viemind.models.submission import Submission
from viemind.services.errors import Conflict


def _escape_like(term: str) -> str:
    # search is a literal substring, not a LIKE pattern
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class Storage:
    """
    Data-access facade over one AsyncSession.

    Every write method commits, so each call is its own transaction. Writes
    that touch several rows (join + counter, submission + participant,
    score + ranks) commit them together.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _commit(self, conflict_message: str | None = None) -> None:
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            if conflict_message is None:
                raise
            raise Conflict(conflict_message)

    # --- users ---

    async def get_user(self, user_id: uuid.UUID) -> User | None:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        return await self.session.scalar(select(User).where(User.email == email))

    async def get_user_by_username(self, username: str) -> User | None:
        return await self.session.scalar(select(User).where(User.username == username))

    async def create_user(self, **fields: Any) -> User:
        user = User(**fields)
        self.session.add(user)
        await self._commit("Email or username already registered")
        return user

    async def update_user(self, user: User, **updates: Any) -> User:
        for key, value in updates.items():
            setattr(user, key, value)
        await self._commit("Username already taken")
        return user

    async def top_users(self, limit: int) -> list[User]:
        q = select(User).order_by(User.points.desc(), User.created_at.asc()).limit(limit)
        return list((await self.session.execute(q)).scalars().all())

    # --- organizations ---

    async def get_organization(self, org_id: uuid.UUID) -> Organization | None:
        return await self.session.get(Organization, org_id)

    async def get_organization_by_user_id(self, user_id: uuid.UUID) -> Organization | None:
        return await self.session.scalar(select(Organization).where(Organization.user_id == user_id))

    async def create_organization(self, owner: User, promote_to=None, **fields: Any) -> Organization:
        org = Organization(user_id=owner.id, **fields)
        self.session.add(org)
        if promote_to is not None:
            owner.role = promote_to
        await self._commit("User already has an organization")
        return org

    async def update_organization(self, org: Organization, **updates: Any) -> Organization:
        for key, value in updates.items():
            setattr(org, key, value)
        await self._commit()
        return org

    # --- competitions ---

    async def get_competition(self, competition_id: uuid.UUID) -> Competition | None:
        return await self.session.get(Competition, competition_id)

    async def list_competitions(
        self,
        *,
        status: str | None = None,
        category: str | None = None,
        featured: bool | None = None,
        search: str | None = None,
    ) -> list[Competition]:
        q = select(Competition)
        if status is not None:
            q = q.where(Competition.status == status)
        if category is not None:
            q = q.where(Competition.category == category)
        if featured is not None:
            q = q.where(Competition.is_featured == featured)
        if search:
            pattern = f"%{_escape_like(search)}%"
            q = q.where(or_(
                Competition.title.ilike(pattern, escape="\\"),
                Competition.description.ilike(pattern, escape="\\"),
            ))
        q = q.order_by(Competition.created_at.desc(), Competition.id.desc())
        return list((await self.session.execute(q)).scalars().all())

    async def featured_competitions(self, limit: int) -> list[Competition]:
        q = (
            select(Competition)
            .where(Competition.is_featured.is_(True))
            .order_by(Competition.created_at.desc(), Competition.id.desc())
            .limit(limit)
        )
        return list((await self.session.execute(q)).scalars().all())

    async def competitions_by_organization(self, org_id: uuid.UUID) -> list[Competition]:
        q = select(Competition).where(Competition.organization_id == org_id).order_by(Competition.created_at.desc())
        return list((await self.session.execute(q)).scalars().all())

    async def create_competition(self, org: Organization, **fields: Any) -> Competition:
        ch = Competition(organization_id=org.id, **fields)
        self.session.add(ch)
        await self._commit()
        return ch

    async def update_competition(self, ch: Competition, **updates: Any) -> Competition:
        for key, value in updates.items():
            setattr(ch, key, value)
        await self._commit()
        return ch

    async def participant_counts(self, competition_ids: list[uuid.UUID]) -> dict[uuid.UUID, int]:
        if not competition_ids:
            return {}
        q = (
            select(Participant.competition_id, func.count(Participant.id))
            .where(Participant.competition_id.in_(competition_ids))
            .group_by(Participant.competition_id)
        )
        rows = (await self.session.execute(q)).all()
        return {cid: int(n) for (cid, n) in rows}

    # --- participants ---

    async def get_participant(self, user_id: uuid.UUID, competition_id: uuid.UUID) -> Participant | None:
        return await self.session.scalar(
            select(Participant).where(Participant.user_id == user_id, Participant.competition_id == competition_id)
        )

    async def get_participant_by_id(self, participant_id: uuid.UUID) -> Participant | None:
        return await self.session.get(Participant, participant_id)

    async def create_participant(self, user_id: uuid.UUID, competition_id: uuid.UUID, team_name: str | None = None) -> Participant:
        p = Participant(user_id=user_id, competition_id=competition_id, team_name=team_name)
        self.session.add(p)
        try:
            await self.session.flush()
            await self.session.execute(
                update(Competition)
                .where(Competition.id == competition_id)
                .values(current_participants=Competition.current_participants + 1)
                .execution_options(synchronize_session=False)
            )
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise Conflict("Already participating")
        return p

    async def set_participant(self, p: Participant, **updates: Any) -> Participant:
        for key, value in updates.items():
            setattr(p, key, value)
        await self._rank_participants(p.competition_id)
        await self._commit()
        return p

    async def participants_by_competition(self, competition_id: uuid.UUID) -> list[tuple[Participant, User]]:
        q = (
            select(Participant, User)
            .join(User, User.id == Participant.user_id)
            .where(Participant.competition_id == competition_id)
            .order_by(Participant.rank.asc().nullslast(), Participant.joined_at.asc())
        )
        return [(p, u) for (p, u) in (await self.session.execute(q)).all()]

    async def participants_by_user(self, user_id: uuid.UUID) -> list[tuple[Participant, Competition]]:
        q = (
            select(Participant, Competition)
            .join(Competition, Competition.id == Participant.competition_id)
            .where(Participant.user_id == user_id)
            .order_by(Participant.joined_at.desc())
        )
        return [(p, c) for (p, c) in (await self.session.execute(q)).all()]

    # --- submissions ---

    async def get_submission(self, submission_id: uuid.UUID) -> Submission | None:
        return await self.session.get(Submission, submission_id)

    async def create_submission(self, participant: Participant, *, file_name: str, file_url: str, file_size: int) -> Submission:
        now = datetime.now(dt_tz.utc)
        sub = Submission(
            participant_id=participant.id,
            competition_id=participant.competition_id,
            file_name=file_name,
            file_url=file_url,
            file_size=file_size,
            submitted_at=now,
        )
        self.session.add(sub)
        participant.last_submission_at = now
        await self._commit()
        return sub

    async def best_submissions(self, competition_id: uuid.UUID, limit: int) -> list[tuple[Submission, Participant, User]]:
        q = (
            select(Submission, Participant, User)
            .join(Participant, Participant.id == Submission.participant_id)
            .join(User, User.id == Participant.user_id)
            .where(Submission.competition_id == competition_id)
            .where(Participant.is_disqualified.is_(False))
            .order_by(Submission.score.desc().nullslast(), Submission.submitted_at.asc(), Submission.id.asc())
            .limit(limit)
        )
        return [(s, p, u) for (s, p, u) in (await self.session.execute(q)).all()]

    async def set_submission_score(self, sub: Submission, score: float, feedback: str | None = None) -> Submission:
        sub.score = score
        if feedback is not None:
            sub.feedback = feedback
        await self.session.flush()

        participant = await self.session.get(Participant, sub.participant_id)
        participant.best_score = await self.session.scalar(
            select(func.max(Submission.score)).where(
                Submission.participant_id == participant.id, Submission.score.is_not(None)
            )
        )
        await self._rank_participants(sub.competition_id)
        await self._commit()
        return sub

    async def _rank_participants(self, competition_id: uuid.UUID) -> None:
        # 1-based rank over graded, eligible participants; earlier last submission wins ties
        parts = (await self.session.execute(
            select(Participant).where(Participant.competition_id == competition_id)
        )).scalars().all()
        ranked = sorted(
            (p for p in parts if p.best_score is not None and not p.is_disqualified),
            key=lambda p: (-p.best_score, as_utc(p.last_submission_at or p.joined_at), as_utc(p.joined_at)),
        )
        for p in parts:
            p.rank = None
        for i, p in enumerate(ranked, start=1):
            p.rank = i

    # --- sessions ---

    async def create_session(self, user_id: uuid.UUID, token: str, expires_at: datetime) -> AuthSession:
        s = AuthSession(user_id=user_id, token=token, expires_at=expires_at)
        self.session.add(s)
        await self._commit()
        return s

    async def get_session(self, token: str) -> tuple[AuthSession, User] | None:
        row = (await self.session.execute(
            select(AuthSession, User).join(User, User.id == AuthSession.user_id).where(AuthSession.token == token)
        )).first()
        return (row[0], row[1]) if row else None

    async def delete_session(self, token: str) -> int:
        res = await self.session.execute(delete(AuthSession).where(AuthSession.token == token))
        await self._commit()
        return int(res.rowcount or 0)

    async def delete_expired_sessions(self, now: datetime | None = None) -> int:
        now = now or datetime.now(dt_tz.utc)
        res = await self.session.execute(delete(AuthSession).where(AuthSession.expires_at < now))
        await self._commit()
        return int(res.rowcount or 0)


async def get_storage(session: AsyncSession = Depends(get_session)) -> Storage:
    return Storage(session)
