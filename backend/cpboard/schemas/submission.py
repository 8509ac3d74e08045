from __future__ import annotations
from datetime import datetime
from uuid import UUID
from pydantic import Field, field_validator
from cpboard.schemas.common import CamelModel, Platform, Difficulty, SubmissionStatus


class SubmissionIn(CamelModel):
    """A submission event as sent by an ingesting client; owner comes from the request."""
    submitted_at: datetime
    problem_id: str = Field(min_length=1, max_length=64)
    problem_title: str = Field(min_length=1, max_length=255)
    difficulty: Difficulty
    status: SubmissionStatus
    language: str = Field(min_length=1, max_length=32)
    execution_time: int | None = Field(default=None, ge=0, description="milliseconds")
    memory_used: float | None = Field(default=None, ge=0, description="megabytes")
    contest_id: str | None = None
    rating: float | None = None


class UpdateUserRequest(CamelModel):
    user_id: UUID
    platform: Platform
    submissions: list[SubmissionIn]

    @field_validator("submissions")
    @classmethod
    def non_empty(cls, v: list[SubmissionIn]):
        if not v:
            raise ValueError("submissions must not be empty")
        return v


class UpdateUserResult(CamelModel):
    message: str
    inserted_count: int
