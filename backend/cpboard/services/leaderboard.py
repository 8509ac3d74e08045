from __future__ import annotations
from sqlalchemy import select, func, Select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import lazyload

from cpboard.models.profile import Profile
from cpboard.models.submission import SubmissionEvent
from cpboard.schemas.leaderboard import SolvedRow, ContestRow

# ---------- ranked boards over submission events ----------
#
# Both boards follow the same shape: filter events, group by owner, inner join
# to the profile, project the public row, sort by the metric with username as
# the tie-breaker. Profiles without a qualifying event never show up.


def _ranked(metric, events_filter: list, platform: str | None) -> Select:
    conds = list(events_filter)
    if platform:
        conds.append(SubmissionEvent.platform == platform)
    grouped = (
        select(SubmissionEvent.user_id.label("user_id"), metric.label("metric"))
        .where(*conds)
        .group_by(SubmissionEvent.user_id)
        .subquery()
    )
    q = (
        select(Profile, grouped.c.metric)
        .options(lazyload(Profile.submissions))
        .join(grouped, grouped.c.user_id == Profile.id)
        .order_by(grouped.c.metric.desc(), Profile.username.asc())
    )
    # rows report the profile platform, so it must match the filter too
    if platform:
        q = q.where(Profile.platform == platform)
    return q


async def solved_leaderboard(session: AsyncSession, platform: str | None = None) -> list[SolvedRow]:
    """Accepted-submission count per user, highest first."""
    q = _ranked(func.count(SubmissionEvent.id), [SubmissionEvent.status == "accepted"], platform)
    rows = (await session.execute(q)).all()
    return [
        SolvedRow(
            id=p.id, username=p.username, name=p.name, avatar=p.avatar,
            platform=p.platform, total_solved=int(metric),
        )
        for p, metric in rows
    ]


async def contest_leaderboard(session: AsyncSession, platform: str | None = None) -> list[ContestRow]:
    """Mean contest rating per user, highest first. Users with no rated submission are left out."""
    q = _ranked(func.avg(SubmissionEvent.rating), [SubmissionEvent.rating.is_not(None)], platform)
    rows = (await session.execute(q)).all()
    return [
        ContestRow(
            id=p.id, username=p.username, name=p.name, avatar=p.avatar,
            platform=p.platform, contest_rating=float(metric),
        )
        for p, metric in rows
    ]
