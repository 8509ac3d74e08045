from __future__ import annotations
import asyncio
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone as dt_tz
from enum import Enum
from typing import Callable, Literal

import structlog

from cpboard.config import settings
from cpboard.dashboard.client import ApiError, LeaderboardClient
from cpboard.dashboard.heatmap import HeatmapCell, calendar, flatten
from cpboard.schemas.admin import TestScrapersRequest
from cpboard.schemas.common import Metric
from cpboard.schemas.leaderboard import SolvedRow, ContestRow

log = structlog.get_logger()

LOAD_ERROR = "Failed to load leaderboard data. Please try again later."


class ViewStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Viewer:
    """Signed-in identity handed to the page; anonymous when ``username`` is None."""
    username: str | None = None
    role: str | None = None
    token: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == settings.admin_role or self.username == settings.admin_username


@dataclass(frozen=True)
class Toast:
    kind: Literal["success", "error"]
    text: str
    raised_at: float

    def expired(self, now: float, ttl: float) -> bool:
        return now - self.raised_at >= ttl


@dataclass
class LeaderboardView:
    metric: Metric = "solved"
    platform: str | None = None
    year: int = field(default_factory=lambda: datetime.now(dt_tz.utc).year)
    status: ViewStatus = ViewStatus.IDLE
    rows: list[SolvedRow] | list[ContestRow] = field(default_factory=list)
    error: str | None = None
    heatmap: dict[date, int] = field(default_factory=dict)
    action_loading: bool = False
    toast: Toast | None = None


class LeaderboardController:
    """
    Drives the leaderboard page.

    Every metric/platform change starts a new generation: in-flight fetches of
    the previous generation are cancelled and any result that still arrives for
    an old generation is dropped, so a slow response never overwrites a newer one.
    The table and the heatmap load independently; a heatmap failure leaves an
    empty calendar instead of an error.
    """

    def __init__(
        self,
        client: LeaderboardClient,
        viewer: Viewer,
        view: LeaderboardView | None = None,
        clock: Callable[[], float] = time.monotonic,
        toast_ttl: float = settings.toast_ttl_seconds,
    ):
        self.client = client
        self.viewer = viewer
        self.view = view or LeaderboardView()
        self._clock = clock
        self._toast_ttl = toast_ttl
        self._generation = 0
        self._inflight: set[asyncio.Task] = set()

    # ---------- filters ----------

    async def set_metric(self, metric: Metric) -> None:
        self.view.metric = metric
        await self.reload()

    async def set_platform(self, platform: str | None) -> None:
        self.view.platform = platform or None
        await self.reload()

    async def rerun(self, metric: Metric, platform: str | None, action: str | None = None) -> None:
        """One page pass: apply the sidebar filters, run the clicked admin action, reload once."""
        platform = platform or None
        changed = (
            self.view.status == ViewStatus.IDLE
            or metric != self.view.metric
            or platform != self.view.platform
        )
        self.view.metric = metric
        self.view.platform = platform
        gen = self._generation
        if action:
            await getattr(self, action)()
        if changed and gen == self._generation:
            await self.reload()

    async def reload(self) -> None:
        self._generation += 1
        gen = self._generation
        for task in self._inflight:
            task.cancel()
        self.view.status = ViewStatus.LOADING
        self.view.error = None
        board = asyncio.create_task(self._load_board(gen))
        heat = asyncio.create_task(self._load_heatmap(gen))
        self._inflight = {board, heat}
        board_result, heat_result = await asyncio.gather(board, heat, return_exceptions=True)
        for name, result in (("board", board_result), ("heatmap", heat_result)):
            if isinstance(result, Exception):
                log.error("leaderboard_loader_crashed", loader=name, generation=gen, error=repr(result))
        if not self._current(gen):
            return
        if isinstance(heat_result, Exception):
            self.view.heatmap = {}
        if self.view.status == ViewStatus.LOADING:
            # the board loader died without settling the view
            self.view.status = ViewStatus.ERROR
            self.view.error = LOAD_ERROR
            self.view.rows = []

    def _current(self, gen: int) -> bool:
        return gen == self._generation

    async def _load_board(self, gen: int) -> None:
        metric, platform = self.view.metric, self.view.platform
        try:
            if metric == "solved":
                rows = await self.client.solved(platform)
            else:
                rows = await self.client.contest(platform)
        except ApiError as e:
            if self._current(gen):
                log.warning("leaderboard_load_failed", metric=metric, platform=platform, error=e.message)
                self.view.status = ViewStatus.ERROR
                self.view.error = LOAD_ERROR
                self.view.rows = []
            return
        if self._current(gen):
            self.view.rows = rows
            self.view.status = ViewStatus.SUCCESS

    async def _load_heatmap(self, gen: int) -> None:
        platform, year = self.view.platform, self.view.year
        try:
            history = await self.client.submission_history(platform, year)
            totals = flatten(history.data, year)
        except ApiError as e:
            log.warning("heatmap_load_failed", platform=platform, error=e.message)
            totals = {}
        if self._current(gen):
            self.view.heatmap = totals

    def heatmap_cells(self) -> list[HeatmapCell]:
        return calendar(self.view.year, self.view.heatmap)

    # ---------- admin actions ----------

    def current_toast(self) -> Toast | None:
        t = self.view.toast
        if t and t.expired(self._clock(), self._toast_ttl):
            self.view.toast = None
        return self.view.toast

    def _notify(self, kind: Literal["success", "error"], text: str) -> None:
        self.view.toast = Toast(kind=kind, text=text, raised_at=self._clock())

    async def _admin_action(self, name: str, run, success_text, failure_text: str, refresh: bool) -> bool:
        if not self.viewer.is_admin:
            log.info("admin_action_denied", action=name, username=self.viewer.username)
            return False
        self.view.action_loading = True
        self.view.toast = None
        try:
            result = await run()
        except ApiError as e:
            log.warning("admin_action_failed", action=name, error=e.message)
            self._notify("error", failure_text)
            return False
        finally:
            self.view.action_loading = False
        log.info("admin_action_done", action=name)
        self._notify("success", success_text(result))
        if refresh:
            await self.reload()
        return True

    async def sync_profiles(self) -> bool:
        return await self._admin_action(
            "sync_profiles",
            self.client.sync_profiles,
            lambda r: (
                f"Successfully synced profiles! Added {r.added_count} new users, "
                f"updated {r.updated_count} existing users."
            ),
            "Failed to sync profiles. Please try again later.",
            refresh=True,
        )

    async def update_stats(self) -> bool:
        return await self._admin_action(
            "update_stats",
            self.client.update_all,
            lambda r: f"Successfully updated stats for {r.updated_count} out of {r.total_users} users.",
            "Failed to update stats. Please try again later.",
            refresh=True,
        )

    async def test_scrapers(self, leetcode: str = "leetcode", codeforces: str = "tourist") -> bool:
        payload = TestScrapersRequest(leetcode_username=leetcode, codeforces_username=codeforces)
        return await self._admin_action(
            "test_scrapers",
            lambda: self.client.test_scrapers(payload),
            lambda r: f"{r.message}: " + ", ".join(
                f"{platform}={info.get('status')}" for platform, info in sorted(r.results.items())
            ),
            "Failed to test scrapers. Please try again later.",
            refresh=False,
        )
