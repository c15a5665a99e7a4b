"""
Pydantic schemas for API request/response models
"""

from tasktrack.api.v1.schemas.pagination import Page
from tasktrack.api.v1.schemas.statistics import StatisticsParams, UserTaskStatistics
from tasktrack.api.v1.schemas.tag import TagCreate, TagListParams, TagResponse, TagUpdate
from tasktrack.api.v1.schemas.task import (
    TagIdsRequest,
    TaskCreate,
    TaskListParams,
    TaskResponse,
    TaskUpdate,
)
from tasktrack.api.v1.schemas.user import UserPublic

__all__ = [
    "Page",
    "StatisticsParams",
    "TagCreate",
    "TagIdsRequest",
    "TagListParams",
    "TagResponse",
    "TagUpdate",
    "TaskCreate",
    "TaskListParams",
    "TaskResponse",
    "TaskUpdate",
    "UserPublic",
    "UserTaskStatistics",
]
