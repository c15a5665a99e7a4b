"""
Task API routes
Lifecycle, tagging, listing and statistics endpoints for tasks
Reference: https://fastapi.tiangolo.com/tutorial/bigger-applications/
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from tasktrack.api.v1.errors import service_errors
from tasktrack.api.v1.schemas.pagination import Page
from tasktrack.api.v1.schemas.statistics import UserTaskStatistics
from tasktrack.api.v1.schemas.task import (
    TagIdsRequest,
    TaskCreate,
    TaskListParams,
    TaskResponse,
    TaskUpdate,
)
from tasktrack.core.dependencies import (
    get_actor_id,
    get_statistics_service,
    get_task_service,
    require_actor_id,
)
from tasktrack.services.statistics import TaskStatisticsService
from tasktrack.services.task import TaskService

logger = logging.getLogger(__name__)

# Create router for task endpoints
router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],  # Groups endpoints in API documentation
    responses={
        404: {"description": "Task not found"},
        500: {"description": "Internal server error"},
    },
)


@router.get(
    "",
    response_model=Page[TaskResponse],
    summary="List tasks",
    description="Filtered, sorted and paginated task listing",
    status_code=status.HTTP_200_OK,
)
async def list_tasks(
    user_id: Optional[int] = Query(None, description="Filter by owner"),
    status_filter: Optional[int] = Query(None, alias="status", description="Filter by status (0, 1, 2)"),
    keyword: Optional[str] = Query(None, description="Search title and description"),
    due_date_from: Optional[datetime] = Query(None, description="Due on or after"),
    due_date_to: Optional[datetime] = Query(None, description="Due on or before"),
    only_deleted: Optional[str] = Query(None, description="Only soft-deleted tasks (true/1/yes/on)"),
    with_deleted: Optional[str] = Query(None, description="Include soft-deleted tasks (true/1/yes/on)"),
    sort_by: Optional[str] = Query(None, description="id, title, status, due_date, created_at or updated_at"),
    sort_direction: Optional[str] = Query(None, description="asc or desc"),
    page: Optional[str] = Query(None, description="Page number, default 1"),
    per_page: Optional[str] = Query(None, description="Page size 1-100, default 15"),
    task_service: TaskService = Depends(get_task_service),
) -> Page[TaskResponse]:
    """
    List tasks

    Paging and sorting parameters are lenient: invalid values fall back to
    their defaults instead of failing the request.

    Returns:
        Page of TaskResponse objects
    """
    params = TaskListParams(
        user_id=user_id,
        status=status_filter,
        keyword=keyword,
        due_date_from=due_date_from,
        due_date_to=due_date_to,
        only_deleted=only_deleted,
        with_deleted=with_deleted,
        sort_by=sort_by,
        sort_direction=sort_direction,
        page=page,
        per_page=per_page,
    )
    with service_errors("listing tasks"):
        result = await task_service.list_tasks(params)
        logger.debug(f"Listed {result.count} of {result.total} tasks (page {result.current_page})")
        return result


@router.post(
    "",
    response_model=TaskResponse,
    summary="Create task",
    description="Create a new task owned by the acting user",
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid title or status"},
        401: {"description": "X-User-Id header missing"},
    },
)
async def create_task(
    task_data: TaskCreate,
    actor_id: int = Depends(require_actor_id),
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    with service_errors("creating task"):
        task = await task_service.create_task(actor_id, task_data)
        return TaskResponse.model_validate(task)


# Declared before "/{task_id}" so the literal path wins
@router.get(
    "/statistics/by-user",
    response_model=List[UserTaskStatistics],
    summary="Task statistics by user",
    description="Users with the most tasks (soft-deleted included) and their latest tasks",
    status_code=status.HTTP_200_OK,
)
async def task_statistics_by_user(
    limit: Optional[str] = Query(None, description="Number of users, 1-100, default 5"),
    statistics: TaskStatisticsService = Depends(get_statistics_service),
) -> List[UserTaskStatistics]:
    """
    Top users by task count

    Results are cached; creating, deleting or restoring a task refreshes them.
    """
    with service_errors("computing task statistics"):
        return await statistics.top_users_by_task_count(limit)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get task by ID",
    description="Retrieve a single task, soft-deleted tasks included",
    status_code=status.HTTP_200_OK,
)
async def get_task(
    task_id: int,
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    with service_errors("retrieving task"):
        task = await task_service.get_task(task_id)
        return TaskResponse.model_validate(task)


@router.api_route(
    "/{task_id}",
    methods=["PUT", "PATCH"],
    response_model=TaskResponse,
    summary="Update task",
    description="Partially update a task; deleted and completed tasks cannot be edited",
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Invalid title or status"},
        401: {"description": "X-User-Id header missing"},
        409: {"description": "Task is deleted or completed"},
    },
)
async def update_task(
    task_id: int,
    task_data: TaskUpdate,
    actor_id: int = Depends(require_actor_id),
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    """
    Update an existing task

    All fields in TaskUpdate are optional, allowing partial updates.
    Only provided fields will be updated.
    """
    with service_errors("updating task"):
        task = await task_service.update_task(task_id, task_data, actor_id)
        return TaskResponse.model_validate(task)


@router.delete(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Delete task",
    description="Soft delete a task; it can be restored later",
    status_code=status.HTTP_200_OK,
    responses={409: {"description": "Task is already deleted"}},
)
async def delete_task(
    task_id: int,
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    with service_errors("deleting task"):
        task = await task_service.delete_task(task_id)
        return TaskResponse.model_validate(task)


@router.post(
    "/{task_id}/complete",
    response_model=TaskResponse,
    summary="Complete task",
    status_code=status.HTTP_200_OK,
    responses={
        401: {"description": "X-User-Id header missing"},
        409: {"description": "Task is deleted or already completed"},
    },
)
async def complete_task(
    task_id: int,
    actor_id: int = Depends(require_actor_id),
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    with service_errors("completing task"):
        task = await task_service.complete_task(task_id, actor_id)
        return TaskResponse.model_validate(task)


@router.post(
    "/{task_id}/restore",
    response_model=TaskResponse,
    summary="Restore task",
    description="Restore a soft-deleted task",
    status_code=status.HTTP_200_OK,
    responses={404: {"description": "No deleted task with this ID"}},
)
async def restore_task(
    task_id: int,
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    with service_errors("restoring task"):
        task = await task_service.restore_task(task_id)
        return TaskResponse.model_validate(task)


@router.post(
    "/{task_id}/tags",
    response_model=TaskResponse,
    summary="Attach tags",
    description="Attach tags to a task; already attached tags are kept as they are",
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Empty tag_ids"},
        404: {"description": "Task or tag not found"},
        409: {"description": "Task is deleted"},
    },
)
async def attach_tags(
    task_id: int,
    body: TagIdsRequest,
    actor_id: Optional[int] = Depends(get_actor_id),
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    with service_errors("attaching tags"):
        task = await task_service.attach_tags(task_id, body.tag_ids)
        logger.debug(f"User {actor_id} attached tags to task {task_id}")
        return TaskResponse.model_validate(task)


@router.delete(
    "/{task_id}/tags",
    response_model=TaskResponse,
    summary="Detach tags",
    description="Detach tags from a task; tags that are not attached are ignored",
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Empty tag_ids"},
        409: {"description": "Task is deleted"},
    },
)
async def detach_tags(
    task_id: int,
    body: TagIdsRequest,
    actor_id: Optional[int] = Depends(get_actor_id),
    task_service: TaskService = Depends(get_task_service),
) -> TaskResponse:
    with service_errors("detaching tags"):
        task = await task_service.detach_tags(task_id, body.tag_ids)
        logger.debug(f"User {actor_id} detached tags from task {task_id}")
        return TaskResponse.model_validate(task)
