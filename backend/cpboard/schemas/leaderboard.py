from __future__ import annotations
import datetime as dt
from datetime import datetime
from uuid import UUID
from pydantic import Field
from cpboard.schemas.common import CamelModel, Platform, Difficulty, TimeRange


class LeaderboardRow(CamelModel):
    """One ranked user; shared shape of the solved and contest boards."""
    id: UUID = Field(alias="_id")
    username: str
    name: str | None = None
    avatar: str | None = None
    platform: Platform


class SolvedRow(LeaderboardRow):
    total_solved: int


class ContestRow(LeaderboardRow):
    contest_rating: float


class ActivityPoint(CamelModel):
    date: dt.date
    count: int = 0
    difficulty: Difficulty


class SubmissionHistory(CamelModel):
    username: str
    platform: Platform
    submissions: list[ActivityPoint]


class SubmissionHistoryResponse(CamelModel):
    success: bool = True
    data: list[SubmissionHistory]
    year: int


class ActivityRow(CamelModel):
    username: str
    platform: Platform
    solved_count: int
    contest_rank: int | None = None
    rating: float | None = None
    last_updated: datetime


class ActivityLeaderboardResponse(CamelModel):
    success: bool = True
    data: list[ActivityRow]
    time_range: TimeRange
    total_users: int


class ActivityRollup(CamelModel):
    weekly_submissions: int
    monthly_submissions: int
    submission_history: list[ActivityPoint]


class UserSummary(ActivityRow):
    activity: ActivityRollup


class UserSummaryResponse(CamelModel):
    success: bool = True
    data: UserSummary
