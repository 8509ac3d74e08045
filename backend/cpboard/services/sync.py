from __future__ import annotations
from typing import Protocol
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from cpboard.schemas.admin import MessageResponse, SyncResult, UpdateAllResult, ScraperTestResult, TestScrapersRequest
from cpboard.services.activity import count_profiles

log = structlog.get_logger()


class SyncService(Protocol):
    """
    Pulls profile data from the competitive-programming sites.

    Implementations own all scraping; the rest of the app only sees these results.

    - ``sync_profiles``: create/update profiles for every account with linked handles.
    - ``update_all``: refresh stats and daily activity for every tracked profile.
    - ``test_scrapers``: fetch the given handles and return diagnostics, storing nothing.
    - ``refresh``: rebuild leaderboard data from the scrapers.
    - ``test_url_extraction``: check that profile URLs resolve to handles.
    """

    async def sync_profiles(self, session: AsyncSession) -> SyncResult: ...
    async def update_all(self, session: AsyncSession) -> UpdateAllResult: ...
    async def test_scrapers(self, payload: TestScrapersRequest) -> ScraperTestResult: ...
    async def refresh(self, session: AsyncSession) -> MessageResponse: ...
    async def test_url_extraction(self) -> MessageResponse: ...


class StubSyncService:
    """No scrapers are wired in; every action reports success without touching any site."""

    async def sync_profiles(self, session: AsyncSession) -> SyncResult:
        log.info("sync_profiles_stub")
        return SyncResult(message="Users synced successfully", added_count=0, updated_count=0)

    async def update_all(self, session: AsyncSession) -> UpdateAllResult:
        total = await count_profiles(session)
        log.info("update_all_stub", total_users=total)
        return UpdateAllResult(message="All user stats updated successfully", updated_count=0, total_users=total)

    async def test_scrapers(self, payload: TestScrapersRequest) -> ScraperTestResult:
        handles = {
            "leetcode": payload.leetcode_username,
            "codeforces": payload.codeforces_username,
            "codechef": payload.codechef_username,
        }
        results = {
            platform: {"username": handle, "status": "not_implemented"}
            for platform, handle in handles.items() if handle
        }
        log.info("test_scrapers_stub", platforms=sorted(results))
        return ScraperTestResult(message="Scrapers tested successfully", results=results)

    async def refresh(self, session: AsyncSession) -> MessageResponse:
        log.info("refresh_stub")
        return MessageResponse(message="Leaderboard refreshed successfully")

    async def test_url_extraction(self) -> MessageResponse:
        log.info("test_url_extraction_stub")
        return MessageResponse(message="URL extraction tested successfully")


_default = StubSyncService()


def get_sync_service() -> SyncService:
    return _default
