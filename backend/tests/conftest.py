from __future__ import annotations
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import uuid
from datetime import date, datetime, timedelta, timezone
import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from cpboard.db import get_session, create_tables
from cpboard.main import app
from cpboard.models.profile import Profile, ActivityDay
from cpboard.models.submission import SubmissionEvent
from cpboard.security import make_access_token


def _now():
    return datetime.now(timezone.utc)


class Seeder:
    """Inserts profiles, daily activity and submission events for a test."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def profile(self, username: str, platform: str = "leetcode", **kw) -> Profile:
        kw.setdefault("last_updated", _now())
        p = Profile(username=username, platform=platform, name=kw.pop("name", username.title()), **kw)
        self.session.add(p)
        await self.session.commit()
        return p

    async def activity(self, profile: Profile, days: list[tuple[date, int]], difficulty: str = "easy") -> None:
        for d, count in days:
            self.session.add(ActivityDay(profile_id=profile.id, date=d, count=count, difficulty=difficulty))
        await self.session.commit()

    async def events(self, profile: Profile, n: int, status: str = "accepted", platform: str | None = None, rating: float | None = None) -> None:
        for i in range(n):
            self.session.add(SubmissionEvent(
                user_id=profile.id,
                platform=platform or profile.platform,
                submitted_at=_now() - timedelta(hours=i),
                problem_id=f"p-{uuid.uuid4().hex[:6]}",
                problem_title=f"Problem {i}",
                difficulty="medium",
                status=status,
                language="python3",
                contest_id="c-1" if rating is not None else None,
                rating=rating,
            ))
        await self.session.commit()


@pytest_asyncio.fixture
async def engine():
    eng = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def seed(session_factory):
    async with session_factory() as session:
        yield Seeder(session)


@pytest_asyncio.fixture
async def client(session_factory):
    async def _session_override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {make_access_token(str(uuid.uuid4()), username='alice', role='user')}"}


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_access_token(str(uuid.uuid4()), username='root', role='admin')}"}
