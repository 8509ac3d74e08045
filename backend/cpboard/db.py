from __future__ import annotations
from typing import Any, AsyncGenerator
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession, AsyncEngine
from sqlalchemy.orm import DeclarativeBase
from cpboard.config import settings

class Base(DeclarativeBase):
    pass


def engine_options(url: str) -> dict[str, Any]:
    """Pool settings per backend; SQLite (local runs, tests) has no server pool to size."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_async_engine(settings.database_url, echo=False, **engine_options(settings.database_url))
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session

async def create_tables(bind: AsyncEngine | None = None) -> None:
    # Alembic owns the schema in deployed environments; this is for local runs and tests.
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
