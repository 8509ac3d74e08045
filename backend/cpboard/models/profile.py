from __future__ import annotations
import uuid
import datetime as dt
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, Float, Date, DateTime, ForeignKey, Index, Uuid, func
from cpboard.db import Base


class Profile(Base):
    """A tracked user on one platform, with aggregate stats and per-day activity."""
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    platform: Mapped[str] = mapped_column(String(16), nullable=False)  # leetcode|codeforces|codechef
    name: Mapped[str | None] = mapped_column(String(120))
    avatar: Mapped[str | None] = mapped_column(String(512))

    solved_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    contest_rank: Mapped[int | None] = mapped_column(Integer)
    rating: Mapped[float | None] = mapped_column(Float)

    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    submissions: Mapped[list["ActivityDay"]] = relationship(
        back_populates="profile",
        order_by="ActivityDay.date",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_profiles_platform_solved", "platform", "solved_count"),
        Index("ix_profiles_last_updated", "last_updated"),
    )


class ActivityDay(Base):
    __tablename__ = "profile_activity"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    profile_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    difficulty: Mapped[str] = mapped_column(String(8), nullable=False)  # easy|medium|hard

    profile: Mapped[Profile] = relationship(back_populates="submissions")

    __table_args__ = (
        Index("ix_profile_activity_profile_date", "profile_id", "date"),
        Index("ix_profile_activity_date", "date"),
    )
