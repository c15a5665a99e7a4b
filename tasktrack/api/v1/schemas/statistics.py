"""
Task statistics schemas
The same models are serialized into the statistics cache
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from tasktrack.api.v1.schemas.task import parse_int
from tasktrack.api.v1.schemas.user import UserPublic

DEFAULT_STATISTICS_LIMIT = 5
MAX_STATISTICS_LIMIT = 100


class RecentTask(BaseModel):
    """Compact task record listed under a user's statistics"""
    id: int
    title: str
    status: int
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserTaskStatistics(BaseModel):
    """Task count for one owner plus a sample of their latest tasks"""
    user: UserPublic
    task_count: int = Field(..., ge=0, description="Tasks owned, soft-deleted ones included")
    recent_tasks: List[RecentTask] = Field(default_factory=list)


UserTaskStatisticsList = TypeAdapter(List[UserTaskStatistics])


class StatisticsParams(BaseModel):
    """
    Query options for the per-user statistics

    An unparseable limit falls back to the default; the value is clamped to
    [1, MAX_STATISTICS_LIMIT].
    """
    limit: int = Field(DEFAULT_STATISTICS_LIMIT, ge=1, le=MAX_STATISTICS_LIMIT)

    @field_validator("limit", mode="before")
    @classmethod
    def normalize_limit(cls, v: Any) -> int:
        return min(MAX_STATISTICS_LIMIT, max(1, parse_int(v, DEFAULT_STATISTICS_LIMIT)))
