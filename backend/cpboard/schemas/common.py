from __future__ import annotations
from typing import Literal, get_args
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Platform = Literal["leetcode", "codeforces", "codechef"]
Difficulty = Literal["easy", "medium", "hard"]
SubmissionStatus = Literal["accepted", "wrong_answer", "time_limit_exceeded", "runtime_error", "compilation_error"]
TimeRange = Literal["day", "week", "month"]
Metric = Literal["solved", "contest"]

PLATFORMS: tuple[str, ...] = get_args(Platform)
TIME_RANGE_DAYS: dict[str, int] = {"day": 1, "week": 7, "month": 30}


class CamelModel(BaseModel):
    """Field names are snake_case in Python and camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)
