from __future__ import annotations
from contextlib import contextmanager
from datetime import datetime, timezone as dt_tz
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Path, Body
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cpboard.auth_deps import get_current_identity, require_admin
from cpboard.config import settings
from cpboard.db import get_session
from cpboard.errors import ValidationError, NotFoundError, UpstreamError
from cpboard.schemas.admin import MessageResponse, SyncResult, UpdateAllResult, ScraperTestResult, TestScrapersRequest
from cpboard.schemas.common import PLATFORMS, TIME_RANGE_DAYS
from cpboard.schemas.leaderboard import (
    SolvedRow, ContestRow, SubmissionHistoryResponse, ActivityLeaderboardResponse, UserSummaryResponse,
)
from cpboard.schemas.submission import UpdateUserRequest, UpdateUserResult
from cpboard.security import Identity
from cpboard.services import activity as activity_svc
from cpboard.services import leaderboard as board_svc
from cpboard.services.sync import SyncService, get_sync_service

router = APIRouter(prefix=settings.api_prefix, tags=["leaderboard"])

MIN_YEAR = 2000

# ---------- query parsing ----------

def parse_platform(raw: str | None) -> str | None:
    if raw is None or raw == "":
        return None
    value = raw.strip().lower()
    if value not in PLATFORMS:
        raise ValidationError(f"Unknown platform '{raw}'", error=f"platform must be one of {', '.join(PLATFORMS)}")
    return value

def parse_time_range(raw: str | None) -> str:
    if not raw:
        return "week"
    if raw not in TIME_RANGE_DAYS:
        raise ValidationError(f"Unknown timeRange '{raw}'", error=f"timeRange must be one of {', '.join(TIME_RANGE_DAYS)}")
    return raw

def parse_year(raw: str | None) -> int:
    if raw is None or raw == "":
        return datetime.now(dt_tz.utc).year
    try:
        year = int(raw)
    except ValueError:
        raise ValidationError(f"Invalid year '{raw}'", error="year must be an integer")
    if year < MIN_YEAR or year > 9998:
        raise ValidationError(f"Invalid year '{raw}'", error=f"year must be between {MIN_YEAR} and 9998")
    return year

def parse_uuid(raw: str | None, field: str) -> UUID | None:
    if not raw:
        return None
    try:
        return UUID(raw)
    except ValueError:
        raise ValidationError(f"Invalid {field} '{raw}'", error=f"{field} must be a UUID")

@contextmanager
def db_errors(message: str):
    try:
        yield
    except SQLAlchemyError as e:
        raise UpstreamError.wrap(message, e)

# ---------- public reads ----------

@router.get("/solved", response_model=list[SolvedRow])
async def get_solved_leaderboard(
    platform: str | None = Query(default=None, description="leetcode | codeforces | codechef"),
    session: AsyncSession = Depends(get_session),
):
    """Leaderboard sorted by accepted submissions."""
    p = parse_platform(platform)
    with db_errors("Error fetching leaderboard"):
        return await board_svc.solved_leaderboard(session, p)

@router.get("/contest", response_model=list[ContestRow])
async def get_contest_leaderboard(
    platform: str | None = Query(default=None, description="leetcode | codeforces | codechef"),
    session: AsyncSession = Depends(get_session),
):
    """Leaderboard sorted by average contest rating."""
    p = parse_platform(platform)
    with db_errors("Error fetching leaderboard"):
        return await board_svc.contest_leaderboard(session, p)

@router.get("/activity", response_model=ActivityLeaderboardResponse)
async def get_activity_leaderboard(
    platform: str | None = Query(default=None),
    time_range: str | None = Query(default=None, alias="timeRange", description="day | week | month"),
    session: AsyncSession = Depends(get_session),
):
    p = parse_platform(platform)
    tr = parse_time_range(time_range)
    with db_errors("Error fetching activity leaderboard"):
        rows = await activity_svc.activity_leaderboard(session, tr, p)
    return ActivityLeaderboardResponse(data=rows, time_range=tr, total_users=len(rows))

@router.get("/submissions", response_model=SubmissionHistoryResponse)
async def get_submission_history(
    platform: str | None = Query(default=None),
    user_id: str | None = Query(default=None, alias="userId"),
    year: str | None = Query(default=None, description="defaults to the current year"),
    session: AsyncSession = Depends(get_session),
):
    """Submission history for the heatmap."""
    p = parse_platform(platform)
    uid = parse_uuid(user_id, "userId")
    y = parse_year(year)
    with db_errors("Error fetching submission history"):
        data = await activity_svc.submission_history(session, y, platform=p, user_id=uid)
    return SubmissionHistoryResponse(data=data, year=y)

@router.get("/user/{user_id}/summary", response_model=UserSummaryResponse)
async def get_user_activity_summary(
    user_id: str = Path(...),
    session: AsyncSession = Depends(get_session),
):
    try:
        uid = UUID(user_id)
    except ValueError:
        raise NotFoundError("User not found")
    with db_errors("Error fetching user activity summary"):
        summary = await activity_svc.user_summary(session, uid)
    return UserSummaryResponse(data=summary)

# ---------- authenticated writes / admin actions ----------

@router.post("/update-user", response_model=UpdateUserResult)
async def update_user_stats(
    payload: UpdateUserRequest,
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_current_identity),
):
    with db_errors("Error updating user stats"):
        inserted = await activity_svc.ingest_submissions(session, payload.user_id, payload.platform, payload.submissions)
    return UpdateUserResult(message="User stats updated successfully", inserted_count=inserted)

@router.post("/sync", response_model=SyncResult)
async def sync_users_to_leaderboard(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_current_identity),
    sync: SyncService = Depends(get_sync_service),
):
    with db_errors("Error syncing users"):
        return await sync.sync_profiles(session)

@router.post("/update-all", response_model=UpdateAllResult)
async def update_all_user_stats(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(require_admin),
    sync: SyncService = Depends(get_sync_service),
):
    with db_errors("Error updating all user stats"):
        return await sync.update_all(session)

@router.post("/test-scrapers", response_model=ScraperTestResult)
async def run_test_scrapers(
    payload: TestScrapersRequest | None = Body(default=None),
    identity: Identity = Depends(get_current_identity),
    sync: SyncService = Depends(get_sync_service),
):
    return await sync.test_scrapers(payload or TestScrapersRequest())

@router.post("/refresh", response_model=MessageResponse)
async def refresh_leaderboard(
    session: AsyncSession = Depends(get_session),
    identity: Identity = Depends(get_current_identity),
    sync: SyncService = Depends(get_sync_service),
):
    with db_errors("Error refreshing leaderboard"):
        return await sync.refresh(session)

@router.post("/test-url-extraction", response_model=MessageResponse)
async def run_test_url_extraction(
    identity: Identity = Depends(get_current_identity),
    sync: SyncService = Depends(get_sync_service),
):
    return await sync.test_url_extraction()
