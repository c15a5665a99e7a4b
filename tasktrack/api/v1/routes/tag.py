"""
Tag API routes
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from tasktrack.api.v1.errors import service_errors
from tasktrack.api.v1.schemas.tag import TagCreate, TagListParams, TagResponse, TagUpdate
from tasktrack.core.dependencies import get_tag_service, require_actor_id
from tasktrack.services.tag import TagService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/tags",
    tags=["tags"],
    responses={
        404: {"description": "Tag not found"},
        500: {"description": "Internal server error"},
    },
)


@router.get(
    "",
    response_model=List[TagResponse],
    summary="List tags",
    description="List active tags with optional owner and name filters",
    status_code=status.HTTP_200_OK,
)
async def list_tags(
    user_id: Optional[int] = Query(None, description="Filter by owner"),
    keyword: Optional[str] = Query(None, description="Search tag names"),
    sort_by: Optional[str] = Query(None, description="id, name, created_at or updated_at"),
    sort_direction: Optional[str] = Query(None, description="asc or desc"),
    tag_service: TagService = Depends(get_tag_service),
) -> List[TagResponse]:
    params = TagListParams(
        user_id=user_id,
        keyword=keyword or None,
        sort_by=sort_by,
        sort_direction=sort_direction,
    )
    with service_errors("listing tags"):
        tags = await tag_service.list_tags(params)
        return [TagResponse.model_validate(tag) for tag in tags]


@router.post(
    "",
    response_model=TagResponse,
    summary="Create tag",
    status_code=status.HTTP_201_CREATED,
    responses={401: {"description": "X-User-Id header missing"}},
)
async def create_tag(
    tag_data: TagCreate,
    actor_id: int = Depends(require_actor_id),
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    with service_errors("creating tag"):
        tag = await tag_service.create_tag(actor_id, tag_data)
        return TagResponse.model_validate(tag)


@router.get(
    "/{tag_id}",
    response_model=TagResponse,
    summary="Get tag by ID",
    status_code=status.HTTP_200_OK,
)
async def get_tag(
    tag_id: int,
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    with service_errors("retrieving tag"):
        tag = await tag_service.get_tag(tag_id)
        return TagResponse.model_validate(tag)


@router.api_route(
    "/{tag_id}",
    methods=["PUT", "PATCH"],
    response_model=TagResponse,
    summary="Update tag",
    status_code=status.HTTP_200_OK,
    responses={401: {"description": "X-User-Id header missing"}},
)
async def update_tag(
    tag_id: int,
    tag_data: TagUpdate,
    actor_id: int = Depends(require_actor_id),
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    with service_errors("updating tag"):
        tag = await tag_service.update_tag(tag_id, tag_data, actor_id)
        return TagResponse.model_validate(tag)


@router.delete(
    "/{tag_id}",
    response_model=TagResponse,
    summary="Delete tag",
    description="Soft delete a tag; it is hidden from every task",
    status_code=status.HTTP_200_OK,
)
async def delete_tag(
    tag_id: int,
    tag_service: TagService = Depends(get_tag_service),
) -> TagResponse:
    with service_errors("deleting tag"):
        tag = await tag_service.delete_tag(tag_id)
        return TagResponse.model_validate(tag)
