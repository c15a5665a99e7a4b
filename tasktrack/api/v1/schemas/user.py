"""
User Pydantic schemas
Only public profile fields are ever serialized
"""
from pydantic import BaseModel, ConfigDict, Field


class UserPublic(BaseModel):
    """
    Public profile of a user, embedded in task, tag and statistics responses
    """
    id: int = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: str = Field(..., description="Email address")

    model_config = ConfigDict(from_attributes=True)
