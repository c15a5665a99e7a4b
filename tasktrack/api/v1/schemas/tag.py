"""
Tag Pydantic schemas
Request and response models for Tag API endpoints
Reference: https://fastapi.tiangolo.com/tutorial/body/
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasktrack.api.v1.schemas.user import UserPublic

# Columns a tag listing may be ordered by
TAG_SORT_COLUMNS = ("id", "name", "created_at", "updated_at")


class TagCreate(BaseModel):
    """
    Schema for creating a new tag
    The owner is the acting user, never part of the body
    """
    name: str = Field(..., min_length=1, max_length=255, description="Tag name")


class TagUpdate(BaseModel):
    """
    Schema for updating a tag
    All fields are optional for partial updates
    Reference: https://fastapi.tiangolo.com/tutorial/body-updates/
    """
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Tag name")


class TagSummary(BaseModel):
    """Tag as embedded in a task response"""
    id: int = Field(..., description="Tag ID")
    name: str = Field(..., description="Tag name")

    model_config = ConfigDict(from_attributes=True)


class TagResponse(TagSummary):
    """
    Schema for tag response
    Includes owner and last updater profiles
    """
    user_id: int = Field(..., description="Owner user ID")
    updated_by: Optional[int] = Field(None, description="User ID of the last updater")
    deleted_at: Optional[datetime] = Field(None, description="Soft-delete timestamp")
    created_at: Optional[datetime] = Field(None, description="Timestamp when tag was created")
    updated_at: Optional[datetime] = Field(None, description="Timestamp when tag was last updated")
    user: Optional[UserPublic] = Field(None, description="Owner profile")
    updater: Optional[UserPublic] = Field(None, description="Last updater profile")


class TagListParams(BaseModel):
    """
    Filter and sort options for listing tags

    Untrusted values are normalized instead of rejected: an unknown sort
    column falls back to created_at and an unknown direction to desc.
    """
    user_id: Optional[int] = Field(None, description="Only tags owned by this user")
    keyword: Optional[str] = Field(None, description="Case-insensitive substring of the name")
    sort_by: str = Field("created_at", description="Sort column")
    sort_direction: Literal["asc", "desc"] = Field("desc", description="Sort direction")

    @field_validator("sort_by", mode="before")
    @classmethod
    def normalize_sort_by(cls, v: Any) -> str:
        return v if v in TAG_SORT_COLUMNS else "created_at"

    @field_validator("sort_direction", mode="before")
    @classmethod
    def normalize_sort_direction(cls, v: Any) -> str:
        return v if v in ("asc", "desc") else "desc"
