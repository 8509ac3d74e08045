from __future__ import annotations
import asyncio
import uuid
from datetime import date
import httpx
import pytest

from cpboard.dashboard.client import LeaderboardClient
from cpboard.dashboard.state import LeaderboardController, LeaderboardView, Viewer, ViewStatus, LOAD_ERROR

API = "http://api.test/api/leaderboard"


def _row(username, platform="leetcode", **metric):
    return {"_id": str(uuid.uuid4()), "username": username, "name": None, "avatar": None, "platform": platform, **metric}


def _history(year):
    return {
        "success": True,
        "year": year,
        "data": [
            {"username": "a", "platform": "leetcode", "submissions": [{"date": f"{year}-03-01", "count": 3, "difficulty": "easy"}]},
            {"username": "b", "platform": "leetcode", "submissions": [{"date": f"{year}-03-01", "count": 1, "difficulty": "hard"}]},
        ],
    }


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _controller(handler, viewer=None, clock=None):
    client = LeaderboardClient(API, token="t", transport=httpx.MockTransport(handler))
    view = LeaderboardView(year=2024)
    return LeaderboardController(client, viewer or Viewer(), view, clock=clock or FakeClock(), toast_ttl=5.0)


def _default_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/solved"):
        return httpx.Response(200, json=[_row("a", totalSolved=5), _row("b", totalSolved=2)])
    if path.endswith("/contest"):
        return httpx.Response(200, json=[_row("b", contestRating=1800.0)])
    if path.endswith("/submissions"):
        return httpx.Response(200, json=_history(int(request.url.params["year"])))
    if path.endswith("/sync"):
        return httpx.Response(200, json={"message": "ok", "addedCount": 2, "updatedCount": 5})
    if path.endswith("/update-all"):
        return httpx.Response(200, json={"message": "ok", "updatedCount": 0, "totalUsers": 7})
    if path.endswith("/test-scrapers"):
        return httpx.Response(200, json={"message": "Scrapers tested successfully", "results": {"codeforces": {"status": "not_implemented"}}})
    return httpx.Response(404, json={"message": "nope"})


@pytest.mark.asyncio
async def test_reload_loads_table_and_heatmap():
    ctl = _controller(_default_handler)
    assert ctl.view.status == ViewStatus.IDLE
    await ctl.reload()
    assert ctl.view.status == ViewStatus.SUCCESS
    assert [r.username for r in ctl.view.rows] == ["a", "b"]
    assert ctl.view.heatmap == {date(2024, 3, 1): 4}
    cells = ctl.heatmap_cells()
    assert len(cells) == 366
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_metric_switch_uses_contest_board():
    seen = []

    def handler(request):
        seen.append((request.url.path, dict(request.url.params)))
        return _default_handler(request)

    ctl = _controller(handler)
    await ctl.set_platform("codeforces")
    await ctl.set_metric("contest")
    assert [r.username for r in ctl.view.rows] == ["b"]
    assert ctl.view.rows[0].contest_rating == 1800.0
    assert ("/api/leaderboard/contest", {"platform": "codeforces"}) in seen
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_board_error_sets_error_state():
    def handler(request):
        if request.url.path.endswith("/solved"):
            return httpx.Response(500, json={"message": "Error fetching leaderboard", "error": "boom"})
        return _default_handler(request)

    ctl = _controller(handler)
    await ctl.reload()
    assert ctl.view.status == ViewStatus.ERROR
    assert ctl.view.error == LOAD_ERROR
    assert ctl.view.rows == []
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_heatmap_failure_degrades_to_empty_calendar():
    def handler(request):
        if request.url.path.endswith("/submissions"):
            return httpx.Response(500, json={"message": "down"})
        return _default_handler(request)

    ctl = _controller(handler)
    await ctl.reload()
    assert ctl.view.status == ViewStatus.SUCCESS
    assert ctl.view.heatmap == {}
    assert all(c.count == 0 for c in ctl.heatmap_cells())
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_stale_response_never_overwrites_newer():
    async def handler(request):
        platform = request.url.params.get("platform")
        if request.url.path.endswith("/solved"):
            if platform == "leetcode":
                await asyncio.sleep(0.2)
                return httpx.Response(200, json=[_row("slow_lc", totalSolved=1)])
            return httpx.Response(200, json=[_row("fast_cf", platform="codeforces", totalSolved=9)])
        return _default_handler(request)

    ctl = _controller(handler)
    first = asyncio.create_task(ctl.set_platform("leetcode"))
    await asyncio.sleep(0.01)
    await ctl.set_platform("codeforces")
    await first
    assert ctl.view.platform == "codeforces"
    assert [r.username for r in ctl.view.rows] == ["fast_cf"]
    assert ctl.view.status == ViewStatus.SUCCESS
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_admin_actions_hidden_from_non_admins():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        return _default_handler(request)

    ctl = _controller(handler, viewer=Viewer(username="alice", role="user"))
    assert ctl.viewer.is_admin is False
    assert await ctl.sync_profiles() is False
    assert calls == []
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_sync_toast_and_expiry():
    clock = FakeClock()
    ctl = _controller(_default_handler, viewer=Viewer(username="root", role="admin"), clock=clock)
    assert await ctl.sync_profiles() is True
    assert ctl.view.action_loading is False
    toast = ctl.current_toast()
    assert toast.kind == "success"
    assert toast.text == "Successfully synced profiles! Added 2 new users, updated 5 existing users."
    # table refreshed after the action
    assert ctl.view.status == ViewStatus.SUCCESS

    clock.now += 4.9
    assert ctl.current_toast() is not None
    clock.now += 0.2
    assert ctl.current_toast() is None
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_update_stats_messages():
    ctl = _controller(_default_handler, viewer=Viewer(username="admin"))
    await ctl.update_stats()
    assert ctl.current_toast().text == "Successfully updated stats for 0 out of 7 users."
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_action_failure_raises_error_toast():
    def handler(request):
        if request.url.path.endswith("/update-all"):
            return httpx.Response(403, json={"success": False, "message": "Admin access required"})
        return _default_handler(request)

    ctl = _controller(handler, viewer=Viewer(username="root", role="admin"))
    assert await ctl.update_stats() is False
    toast = ctl.current_toast()
    assert toast.kind == "error"
    assert toast.text == "Failed to update stats. Please try again later."
    assert ctl.view.action_loading is False
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_test_scrapers_does_not_reload():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        return _default_handler(request)

    ctl = _controller(handler, viewer=Viewer(username="root", role="admin"))
    assert await ctl.test_scrapers() is True
    assert calls == ["/api/leaderboard/test-scrapers"]
    assert "codeforces=not_implemented" in ctl.current_toast().text
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_malformed_board_payload_sets_error_state():
    def handler(request):
        if request.url.path.endswith("/solved"):
            return httpx.Response(200, json=[{"username": "x"}])
        return _default_handler(request)

    ctl = _controller(handler)
    await ctl.reload()
    assert ctl.view.status == ViewStatus.ERROR
    assert ctl.view.error == LOAD_ERROR
    assert ctl.view.rows == []
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_non_json_heatmap_clears_previous_calendar():
    broken = {"on": False}

    def handler(request):
        if broken["on"] and request.url.path.endswith("/submissions"):
            return httpx.Response(200, text="<html>maintenance</html>")
        return _default_handler(request)

    ctl = _controller(handler)
    await ctl.reload()
    assert ctl.view.heatmap == {date(2024, 3, 1): 4}

    broken["on"] = True
    await ctl.reload()
    assert ctl.view.status == ViewStatus.SUCCESS
    assert ctl.view.heatmap == {}
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_crashing_loader_still_settles_view():
    def handler(request):
        if request.url.path.endswith("/solved"):
            raise RuntimeError("transport bug")
        if request.url.path.endswith("/submissions"):
            raise RuntimeError("transport bug")
        return _default_handler(request)

    ctl = _controller(handler)
    await ctl.reload()
    assert ctl.view.status == ViewStatus.ERROR
    assert ctl.view.error == LOAD_ERROR
    assert ctl.view.heatmap == {}
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_rerun_applies_filters_before_action_and_reloads_once():
    calls = []

    def handler(request):
        calls.append((request.url.path, request.url.params.get("platform")))
        return _default_handler(request)

    ctl = _controller(handler, viewer=Viewer(username="root", role="admin"))
    await ctl.rerun("contest", "codeforces", "sync_profiles")
    assert calls[0] == ("/api/leaderboard/sync", None)
    assert sorted(calls[1:]) == [
        ("/api/leaderboard/contest", "codeforces"),
        ("/api/leaderboard/submissions", "codeforces"),
    ]
    assert ctl.view.metric == "contest"
    assert [r.username for r in ctl.view.rows] == ["b"]
    await ctl.client.aclose()


@pytest.mark.asyncio
async def test_rerun_reloads_on_filter_change_when_action_skips_reload():
    calls = []

    def handler(request):
        calls.append(request.url.path)
        return _default_handler(request)

    ctl = _controller(handler, viewer=Viewer(username="root", role="admin"))
    await ctl.rerun("solved", "leetcode", "test_scrapers")
    assert calls[0] == "/api/leaderboard/test-scrapers"
    assert sorted(calls[1:]) == ["/api/leaderboard/solved", "/api/leaderboard/submissions"]

    calls.clear()
    await ctl.rerun("solved", "leetcode")
    assert calls == []
    await ctl.client.aclose()
