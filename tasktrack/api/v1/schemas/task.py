"""
Task Pydantic schemas
Request and response models for Task API endpoints
Reference: https://fastapi.tiangolo.com/tutorial/body/
"""
from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from tasktrack.api.v1.schemas.tag import TagSummary
from tasktrack.api.v1.schemas.user import UserPublic
from tasktrack.models.task import TaskStatus

# Columns a task listing may be ordered by; anything else falls back to created_at
TASK_SORT_COLUMNS = ("id", "title", "status", "due_date", "created_at", "updated_at")

DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 100

_TRUTHY = ("true", "1", "yes", "on")


def parse_flag(value: Any) -> bool:
    """
    Lenient boolean for query-string flags.

    "true", "1", "yes" and "on" (any case) and the number 1 are true;
    everything else, including unparseable input, is false.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, (int, float)):
        return int(value) == 1
    return False


def parse_int(value: Any, default: int) -> int:
    """Integer from untrusted input, or `default` when it does not parse."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class Visibility(str, Enum):
    """Which side of the soft-delete tombstone a listing sees."""

    ACTIVE = "active"  # deleted_at IS NULL
    DELETED = "deleted"  # deleted_at IS NOT NULL
    ALL = "all"  # no predicate


class TaskBase(BaseModel):
    """
    Base schema with common Task fields
    Used as base for create and response schemas
    """
    title: str = Field(..., min_length=1, max_length=255, description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    due_date: Optional[datetime] = Field(None, description="Deadline")


class TaskCreate(TaskBase):
    """
    Schema for creating a new task
    status is validated by the service (0 pending, 1 in progress, 2 completed)
    """
    status: int = Field(TaskStatus.PENDING.value, description="Initial status: 0, 1 or 2")


class TaskUpdate(BaseModel):
    """
    Schema for updating a task
    All fields are optional for partial updates; only fields sent are applied
    Reference: https://fastapi.tiangolo.com/tutorial/body-updates/
    """
    title: Optional[str] = Field(None, min_length=1, max_length=255, description="Task title")
    description: Optional[str] = Field(None, description="Task description")
    status: Optional[int] = Field(None, description="New status: 0, 1 or 2")
    due_date: Optional[datetime] = Field(None, description="Deadline")


class TaskResponse(TaskBase):
    """
    Schema for task response
    Includes all fields from TaskBase plus lifecycle fields, owner, updater and tags
    """
    id: int = Field(..., description="Task ID")
    user_id: int = Field(..., description="Owner user ID")
    status: int = Field(..., description="Status: 0 pending, 1 in progress, 2 completed")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")
    deleted_at: Optional[datetime] = Field(None, description="Soft-delete timestamp")
    updated_by: Optional[int] = Field(None, description="User ID of the last updater")
    created_at: Optional[datetime] = Field(None, description="Timestamp when task was created")
    updated_at: Optional[datetime] = Field(None, description="Timestamp when task was last updated")
    user: Optional[UserPublic] = Field(None, description="Owner profile")
    updater: Optional[UserPublic] = Field(None, description="Last updater profile")
    tags: List[TagSummary] = Field(default_factory=list, description="Active tags attached to the task")

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def status_label(self) -> str:
        """Human readable status (pending, in_progress, completed)"""
        try:
            return TaskStatus(self.status).label
        except ValueError:
            return "unknown"


class TagIdsRequest(BaseModel):
    """Body of the attach/detach tag endpoints"""
    tag_ids: List[int] = Field(default_factory=list, description="Tag IDs to attach or detach")


class TaskListParams(BaseModel):
    """
    Filter, sort and pagination options for listing tasks

    Built from untrusted query parameters. Paging and sorting values are
    normalized instead of rejected so every request maps to a bounded query:
    - sort_by outside TASK_SORT_COLUMNS falls back to created_at
    - sort_direction other than asc/desc becomes desc
    - page below 1 or unparseable becomes 1
    - per_page is clamped to [1, MAX_PER_PAGE] (unparseable: DEFAULT_PER_PAGE)
    - only_deleted wins over with_deleted
    """
    user_id: Optional[int] = Field(None, description="Only tasks owned by this user")
    status: Optional[int] = Field(None, description="Only tasks with this status")
    keyword: Optional[str] = Field(None, description="Case-insensitive substring of title or description")
    due_date_from: Optional[datetime] = Field(None, description="Inclusive lower bound on due_date")
    due_date_to: Optional[datetime] = Field(None, description="Inclusive upper bound on due_date")
    only_deleted: bool = Field(False, description="Only soft-deleted tasks")
    with_deleted: bool = Field(False, description="Include soft-deleted tasks")
    sort_by: str = Field("created_at", description="Sort column")
    sort_direction: Literal["asc", "desc"] = Field("desc", description="Sort direction")
    page: int = Field(1, ge=1, description="Page number (1-indexed)")
    per_page: int = Field(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE, description="Items per page")

    @field_validator("keyword", mode="before")
    @classmethod
    def blank_keyword_is_none(cls, v: Any) -> Optional[str]:
        if v is None or (isinstance(v, str) and v == ""):
            return None
        return v

    @field_validator("only_deleted", "with_deleted", mode="before")
    @classmethod
    def lenient_flag(cls, v: Any) -> bool:
        return parse_flag(v)

    @field_validator("sort_by", mode="before")
    @classmethod
    def normalize_sort_by(cls, v: Any) -> str:
        return v if v in TASK_SORT_COLUMNS else "created_at"

    @field_validator("sort_direction", mode="before")
    @classmethod
    def normalize_sort_direction(cls, v: Any) -> str:
        return v if v in ("asc", "desc") else "desc"

    @field_validator("page", mode="before")
    @classmethod
    def normalize_page(cls, v: Any) -> int:
        return max(1, parse_int(v, 1))

    @field_validator("per_page", mode="before")
    @classmethod
    def clamp_per_page(cls, v: Any) -> int:
        return min(MAX_PER_PAGE, max(1, parse_int(v, DEFAULT_PER_PAGE)))

    @property
    def visibility(self) -> Visibility:
        if self.only_deleted:
            return Visibility.DELETED
        if self.with_deleted:
            return Visibility.ALL
        return Visibility.ACTIVE

    @property
    def offset(self) -> int:
        """Calculate offset for database query"""
        return (self.page - 1) * self.per_page
