from __future__ import annotations
import asyncio

import jwt
import pandas as pd
import streamlit as st

from cpboard.config import settings
from cpboard.dashboard.client import LeaderboardClient
from cpboard.dashboard.heatmap import figure, legend_labels
from cpboard.dashboard.state import LeaderboardController, LeaderboardView, Viewer, ViewStatus
from cpboard.logging_setup import configure_logging

PLATFORM_OPTIONS = {"All Platforms": None, "LeetCode": "leetcode", "Codeforces": "codeforces", "CodeChef": "codechef"}
METRIC_OPTIONS = {"Problems Solved": "solved", "Contest Rating": "contest"}
MEDALS = {1: "🥇", 2: "🥈", 3: "🥉"}


def viewer_from_token(token: str | None) -> Viewer:
    """Display-only read of the token claims; the API does the real verification."""
    if not token:
        return Viewer()
    try:
        claims = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return Viewer()
    return Viewer(username=claims.get("username"), role=claims.get("role"), token=token)


def rows_frame(view: LeaderboardView) -> pd.DataFrame:
    metric_col = "Problems Solved" if view.metric == "solved" else "Contest Rating"
    records = []
    for rank, row in enumerate(view.rows, start=1):
        value = row.total_solved if view.metric == "solved" else round(row.contest_rating, 1)
        records.append({
            "Rank": f"{MEDALS.get(rank, '')} {rank}".strip(),
            "User": row.username,
            "Name": row.name or "",
            "Platform": row.platform,
            metric_col: value,
        })
    return pd.DataFrame(records, columns=["Rank", "User", "Name", "Platform", metric_col])


async def _drive(viewer: Viewer, view: LeaderboardView, action: str | None, metric: str, platform: str | None):
    async with LeaderboardClient(settings.dashboard_api_url, viewer.token, settings.dashboard_timeout_seconds) as client:
        ctl = LeaderboardController(client, viewer, view)
        await ctl.rerun(metric, platform, action)
        return ctl.current_toast(), ctl.heatmap_cells()


def render(viewer: Viewer, view: LeaderboardView) -> None:
    st.title("Competitive Programming Leaderboard")
    st.markdown("Track and compare your competitive programming progress with peers across major platforms.")

    action = None
    if viewer.is_admin:
        c1, c2, c3 = st.columns(3)
        if c1.button("Sync Profiles", disabled=view.action_loading):
            action = "sync_profiles"
        if c2.button("Update Stats", disabled=view.action_loading):
            action = "update_stats"
        if c3.button("Test Scrapers", disabled=view.action_loading):
            action = "test_scrapers"

    with st.sidebar:
        st.header("Filters")
        metric_label = st.radio("Ranking", list(METRIC_OPTIONS), index=list(METRIC_OPTIONS.values()).index(view.metric))
        platform_label = st.radio("Platform", list(PLATFORM_OPTIONS), index=list(PLATFORM_OPTIONS.values()).index(view.platform))

    with st.spinner("Loading leaderboard..."):
        toast, cells = asyncio.run(
            _drive(viewer, view, action, METRIC_OPTIONS[metric_label], PLATFORM_OPTIONS[platform_label])
        )

    if toast:
        (st.success if toast.kind == "success" else st.error)(toast.text)

    st.subheader("Activity Heatmap")
    st.plotly_chart(figure(cells, view.year), use_container_width=True)
    st.caption("Submissions per day: " + " · ".join(legend_labels()))

    if view.status == ViewStatus.ERROR:
        st.error(view.error)
    elif not view.rows:
        st.info("No leaderboard entries for the selected filters")
    else:
        st.dataframe(rows_frame(view), use_container_width=True, hide_index=True)


def main() -> None:
    configure_logging()
    st.set_page_config(page_title="CP Leaderboard", page_icon="🏆", layout="wide")
    viewer = viewer_from_token(settings.dashboard_token)
    if "leaderboard_view" not in st.session_state:
        st.session_state["leaderboard_view"] = LeaderboardView()
    render(viewer, st.session_state["leaderboard_view"])


if __name__ == "__main__":
    main()
