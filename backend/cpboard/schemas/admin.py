from __future__ import annotations
from typing import Any
from pydantic import Field
from cpboard.schemas.common import CamelModel


class MessageResponse(CamelModel):
    message: str


class SyncResult(MessageResponse):
    added_count: int = 0
    updated_count: int = 0


class UpdateAllResult(MessageResponse):
    updated_count: int = 0
    total_users: int = 0


class TestScrapersRequest(CamelModel):
    leetcode_username: str | None = None
    codeforces_username: str | None = None
    codechef_username: str | None = None


class ScraperTestResult(MessageResponse):
    results: dict[str, Any] = Field(default_factory=dict)
