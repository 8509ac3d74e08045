from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Float, Integer, DateTime, ForeignKey, Index, Uuid, func
from cpboard.db import Base


class SubmissionEvent(Base):
    __tablename__ = "submission_events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    platform: Mapped[str] = mapped_column(String(16), nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    problem_id: Mapped[str] = mapped_column(String(64), nullable=False)
    problem_title: Mapped[str] = mapped_column(String(255), nullable=False)
    difficulty: Mapped[str] = mapped_column(String(8), nullable=False)  # easy|medium|hard
    status: Mapped[str] = mapped_column(String(32), nullable=False)     # accepted|wrong_answer|...
    language: Mapped[str] = mapped_column(String(32), nullable=False)

    execution_time: Mapped[int | None] = mapped_column(Integer)  # ms
    memory_used: Mapped[float | None] = mapped_column(Float)     # MB

    # contest submissions only
    contest_id: Mapped[str | None] = mapped_column(String(64))
    rating: Mapped[float | None] = mapped_column(Float)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_submission_events_submitted_platform", "submitted_at", "platform"),
        Index("ix_submission_events_user_platform", "user_id", "platform"),
        Index("ix_submission_events_user_status", "user_id", "status"),
        Index("ix_submission_events_user_difficulty", "user_id", "difficulty"),
    )
