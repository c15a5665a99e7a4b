"""
User API routes
Public profiles only; accounts are managed by the identity service
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from tasktrack.api.v1.errors import service_errors
from tasktrack.api.v1.schemas.user import UserPublic
from tasktrack.core.dependencies import get_user_service
from tasktrack.services.user import UserService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["users"],
    responses={
        404: {"description": "User not found"},
        500: {"description": "Internal server error"},
    },
)


@router.get(
    "",
    response_model=List[UserPublic],
    summary="List users",
    description="Public profiles ordered by ID, optionally filtered by name or email",
    status_code=status.HTTP_200_OK,
)
async def list_users(
    keyword: Optional[str] = Query(None, description="Search name and email"),
    user_service: UserService = Depends(get_user_service),
) -> List[UserPublic]:
    with service_errors("listing users"):
        users = await user_service.list_users(keyword)
        return [UserPublic.model_validate(user) for user in users]


@router.get(
    "/{user_id}",
    response_model=UserPublic,
    summary="Get user by ID",
    status_code=status.HTTP_200_OK,
)
async def get_user(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
) -> UserPublic:
    with service_errors("retrieving user"):
        user = await user_service.get_user(user_id)
        return UserPublic.model_validate(user)
