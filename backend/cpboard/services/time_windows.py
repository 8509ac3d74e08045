from __future__ import annotations
from datetime import date, datetime, timedelta, timezone as dt_tz
from typing import Iterable, Protocol

from cpboard.schemas.common import TIME_RANGE_DAYS


class _DailyCount(Protocol):
    date: date
    count: int


def utc_now() -> datetime:
    return datetime.now(dt_tz.utc)


def year_bounds(year: int) -> tuple[date, date]:
    """
    Half-open calendar window ``[Jan 1 of year, Jan 1 of year+1)``.

    Examples:
        >>> year_bounds(2024)
        (datetime.date(2024, 1, 1), datetime.date(2025, 1, 1))
    """
    return date(year, 1, 1), date(year + 1, 1, 1)


def in_year(d: date, year: int) -> bool:
    start, end = year_bounds(year)
    return start <= d < end


def activity_cutoff(time_range: str, now: datetime | None = None) -> datetime:
    """
    Earliest ``lastUpdated`` that still counts for an activity window.

    Unknown ranges fall back to a week.
    """
    days = TIME_RANGE_DAYS.get(time_range, TIME_RANGE_DAYS["week"])
    return (now or utc_now()) - timedelta(days=days)


def sum_since(points: Iterable[_DailyCount], days: int, today: date) -> int:
    """
    Sum ``count`` over points dated on or after ``today - days``.

    Examples:
        >>> from types import SimpleNamespace as P
        >>> today = date(2025, 1, 31)
        >>> pts = [P(date=date(2025, 1, 30), count=3), P(date=date(2025, 1, 21), count=5)]
        >>> sum_since(pts, 7, today), sum_since(pts, 30, today)
        (3, 8)
    """
    cutoff = today - timedelta(days=days)
    return sum(int(p.count or 0) for p in points if p.date >= cutoff)
