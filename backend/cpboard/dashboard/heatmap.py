from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable

import plotly.graph_objects as go

from cpboard.schemas.leaderboard import SubmissionHistory
from cpboard.services.time_windows import year_bounds, in_year

MAX_LEVEL = 4

EMPTY_COLOUR = "#1a1a1a"
LEVEL_COLOURS = ["#0e4429", "#006d32", "#26a641", "#39d353", "#6ef07a"]

# (lower bound, colour); index 0 is "no activity"
LEGEND = [
    (0, "#1a1a1a"),
    (1, "#0e4429"),
    (3, "#006d32"),
    (5, "#26a641"),
    (7, "#39d353"),
]


@dataclass(frozen=True)
class HeatmapCell:
    date: date
    count: int
    level: int | None  # None for days without activity
    week: int           # column, 0 = week holding Jan 1
    weekday: int        # row, 0 = Sunday


def level_for(count: int) -> int | None:
    """Colour bucket for a day: ``min(floor(count / 2), 4)``; empty days have no bucket."""
    if count <= 0:
        return None
    return min(count // 2, MAX_LEVEL)


def flatten(history: Iterable[SubmissionHistory], year: int) -> dict[date, int]:
    """Sum every user's points into one series keyed by day."""
    totals: dict[date, int] = {}
    for user in history:
        for point in user.submissions:
            if not in_year(point.date, year):
                continue
            totals[point.date] = totals.get(point.date, 0) + int(point.count or 0)
    return totals


def calendar(year: int, totals: dict[date, int] | None = None) -> list[HeatmapCell]:
    """One cell per day of ``year``, laid out GitHub style (weeks as columns, Sunday first)."""
    totals = totals or {}
    start, end = year_bounds(year)
    offset = (start.weekday() + 1) % 7  # Sunday-based weekday of Jan 1
    cells = []
    d = start
    while d < end:
        idx = (d - start).days + offset
        count = totals.get(d, 0)
        cells.append(HeatmapCell(date=d, count=count, level=level_for(count), week=idx // 7, weekday=idx % 7))
        d += timedelta(days=1)
    return cells


def legend_labels() -> list[str]:
    labels = []
    for i, (threshold, _) in enumerate(LEGEND):
        if i == len(LEGEND) - 1:
            labels.append(f"{threshold}+")
        else:
            labels.append(str(threshold))
    return labels


def figure(cells: list[HeatmapCell], year: int) -> go.Figure:
    weeks = max((c.week for c in cells), default=0) + 1
    z: list[list[float | None]] = [[None] * weeks for _ in range(7)]
    text: list[list[str]] = [[""] * weeks for _ in range(7)]
    for c in cells:
        z[c.weekday][c.week] = -1 if c.level is None else c.level
        text[c.weekday][c.week] = (
            f"{c.date.isoformat()}: {c.count} submissions" if c.count else f"{c.date.isoformat()}: No submissions"
        )
    # discrete scale: -1 empty, 0..4 levels
    colours = [EMPTY_COLOUR, *LEVEL_COLOURS]
    n = len(colours)
    colorscale = []
    for i, colour in enumerate(colours):
        colorscale.append([i / n, colour])
        colorscale.append([(i + 1) / n, colour])
    fig = go.Figure(go.Heatmap(
        z=z,
        text=text,
        hoverinfo="text",
        zmin=-1,
        zmax=MAX_LEVEL,
        colorscale=colorscale,
        showscale=False,
        xgap=3,
        ygap=3,
    ))
    fig.update_layout(
        title=f"Activity Heatmap {year}",
        yaxis=dict(
            tickmode="array", tickvals=list(range(7)),
            ticktext=["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"],
            autorange="reversed", showgrid=False,
        ),
        xaxis=dict(showticklabels=False, showgrid=False),
        plot_bgcolor="#0c1c29",
        height=220,
        margin=dict(l=40, r=10, t=40, b=10),
    )
    return fig
