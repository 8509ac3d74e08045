from __future__ import annotations
from datetime import datetime
from uuid import UUID
from sqlalchemy import select, exists, func, nulls_last
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import lazyload
import structlog

from cpboard.errors import NotFoundError, ValidationError
from cpboard.models.profile import Profile, ActivityDay
from cpboard.models.submission import SubmissionEvent
from cpboard.schemas.leaderboard import (
    ActivityPoint, ActivityRollup, ActivityRow, SubmissionHistory, UserSummary,
)
from cpboard.schemas.submission import SubmissionIn
from cpboard.services.time_windows import year_bounds, in_year, activity_cutoff, sum_since, utc_now

log = structlog.get_logger()


def _points(days: list[ActivityDay]) -> list[ActivityPoint]:
    return [ActivityPoint(date=d.date, count=d.count, difficulty=d.difficulty) for d in days]


def _activity_row(p: Profile) -> dict:
    return dict(
        username=p.username, platform=p.platform, solved_count=p.solved_count,
        contest_rank=p.contest_rank, rating=p.rating, last_updated=p.last_updated,
    )


async def submission_history(
    session: AsyncSession,
    year: int,
    platform: str | None = None,
    user_id: UUID | None = None,
) -> list[SubmissionHistory]:
    """Per-user daily counts for one calendar year, for the heatmap."""
    start, end = year_bounds(year)
    q = (
        select(Profile)
        .where(exists().where(
            ActivityDay.profile_id == Profile.id,
            ActivityDay.date >= start,
            ActivityDay.date < end,
        ))
        .order_by(Profile.username.asc())
    )
    if platform:
        q = q.where(Profile.platform == platform)
    if user_id:
        q = q.where(Profile.id == user_id)
    profiles = (await session.execute(q)).scalars().all()
    return [
        SubmissionHistory(
            username=p.username,
            platform=p.platform,
            submissions=_points([d for d in p.submissions if in_year(d.date, year)]),
        )
        for p in profiles
    ]


async def activity_leaderboard(
    session: AsyncSession,
    time_range: str = "week",
    platform: str | None = None,
    now: datetime | None = None,
) -> list[ActivityRow]:
    cutoff = activity_cutoff(time_range, now)
    q = (
        select(Profile)
        .options(lazyload(Profile.submissions))
        .where(Profile.last_updated >= cutoff)
        .order_by(Profile.solved_count.desc(), nulls_last(Profile.rating.desc()), Profile.username.asc())
    )
    if platform:
        q = q.where(Profile.platform == platform)
    profiles = (await session.execute(q)).scalars().all()
    return [ActivityRow(**_activity_row(p)) for p in profiles]


async def user_summary(session: AsyncSession, user_id: UUID, now: datetime | None = None) -> UserSummary:
    p = await session.get(Profile, user_id)
    if not p:
        raise NotFoundError("User not found")
    today = (now or utc_now()).date()
    return UserSummary(
        **_activity_row(p),
        activity=ActivityRollup(
            weekly_submissions=sum_since(p.submissions, 7, today),
            monthly_submissions=sum_since(p.submissions, 30, today),
            submission_history=_points(p.submissions),
        ),
    )


async def count_profiles(session: AsyncSession) -> int:
    return int(await session.scalar(select(func.count()).select_from(Profile)) or 0)


async def ingest_submissions(
    session: AsyncSession,
    user_id: UUID,
    platform: str,
    submissions: list[SubmissionIn],
) -> int:
    """Insert submission events for one user in a single transaction."""
    profile_platform = await session.scalar(select(Profile.platform).where(Profile.id == user_id))
    if profile_platform is None:
        raise NotFoundError("User not found")
    if platform != profile_platform:
        raise ValidationError(
            "Platform does not match the user profile",
            f"profile is on {profile_platform}, submissions are for {platform}",
        )
    session.add_all([
        SubmissionEvent(user_id=user_id, platform=platform, **s.model_dump())
        for s in submissions
    ])
    await session.commit()
    log.info("submissions_ingested", user_id=str(user_id), platform=platform, count=len(submissions))
    return len(submissions)
