"""
Task service layer
Task lifecycle (create, update, complete, soft delete, restore), tag
association and filtered listing
Reference: https://fastapi.tiangolo.com/tutorial/sql-databases/
"""
import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from tasktrack.api.v1.schemas.pagination import Page
from tasktrack.api.v1.schemas.task import TaskCreate, TaskListParams, TaskResponse, TaskUpdate
from tasktrack.core.clock import Clock, SystemClock
from tasktrack.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from tasktrack.core.ports import TagRepository, TaskRepository
from tasktrack.models.task import Task, TaskStatus
from tasktrack.services.statistics import TaskStatisticsService

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 255


def validate_title(title: Any) -> str:
    """Title must be a non-blank string of at most 255 characters."""
    if not isinstance(title, str) or not title.strip():
        raise InvalidArgumentError("title is required")
    if len(title) > TITLE_MAX_LENGTH:
        raise InvalidArgumentError(f"title must not exceed {TITLE_MAX_LENGTH} characters")
    return title


def validate_status(value: Any) -> TaskStatus:
    """Status must be one of 0 (pending), 1 (in progress) or 2 (completed)."""
    if isinstance(value, bool):
        raise InvalidArgumentError("status must be 0, 1 or 2")
    try:
        return TaskStatus(value)
    except ValueError:
        raise InvalidArgumentError("status must be 0, 1 or 2") from None


class TaskService:
    """
    Service class for task business logic

    State rules:
    - completed_at is set exactly while status is COMPLETED
    - a soft-deleted task can only be restored
    - a completed task can only be deleted or restored
    Create, delete and restore evict the cached statistics. With
    `after_commit` set, eviction is handed to it and runs once the
    surrounding transaction commits; otherwise it runs immediately.
    """

    def __init__(
        self,
        repository: TaskRepository,
        tag_repository: TagRepository,
        statistics: TaskStatisticsService,
        clock: Optional[Clock] = None,
        after_commit: Optional[Callable[[Callable[[], Awaitable[None]]], None]] = None,
    ):
        self.repository = repository
        self.tag_repository = tag_repository
        self.statistics = statistics
        self.clock = clock or SystemClock()
        self.after_commit = after_commit

    async def _load(self, task_id: int) -> Task:
        task = await self.repository.find_by_id(task_id, include_deleted=True)
        if task is None:
            raise NotFoundError(f"Task with ID {task_id} not found")
        return task

    async def _invalidate_statistics(self) -> None:
        if self.after_commit is not None:
            self.after_commit(self._clear_statistics_cache)
        else:
            await self._clear_statistics_cache()

    async def _clear_statistics_cache(self) -> None:
        # Eviction is best effort: a cache outage must not fail the mutation
        try:
            await self.statistics.clear_cache()
        except Exception as e:
            logger.warning(
                f"Failed to clear task statistics cache: {type(e).__name__}: {e}",
                exc_info=True,
            )

    async def create_task(self, owner_id: int, task_data: TaskCreate) -> Task:
        """
        Create a new task owned by `owner_id`

        Args:
            owner_id: Owner user ID (fixed for the task's lifetime)
            task_data: Task creation data

        Returns:
            Created Task with owner and tags loaded

        Raises:
            InvalidArgumentError: If title or status is invalid
        """
        title = validate_title(task_data.title)
        status = validate_status(task_data.status)

        task = await self.repository.create(
            {
                "user_id": owner_id,
                "title": title,
                "description": task_data.description,
                "status": status.value,
                "due_date": task_data.due_date,
                "completed_at": self.clock.now() if status is TaskStatus.COMPLETED else None,
            }
        )
        logger.info(f"Created task {task.id} for user {owner_id} (status={status.label})")

        await self._invalidate_statistics()
        return task

    async def get_task(self, task_id: int) -> Task:
        """
        Retrieve a single task by ID, soft-deleted tasks included

        Raises:
            NotFoundError: If no task has this ID
        """
        return await self._load(task_id)

    async def update_task(
        self,
        task_id: int,
        task_data: TaskUpdate,
        actor_id: Optional[int] = None,
    ) -> Task:
        """
        Apply a partial update

        Only fields present in `task_data` are written. When status moves to
        COMPLETED, completed_at is stamped; when it leaves COMPLETED it is
        cleared. Otherwise completed_at is not touched.

        Args:
            task_id: ID of the task to update
            task_data: Fields to change
            actor_id: User performing the update, recorded as updated_by

        Returns:
            Updated Task

        Raises:
            NotFoundError: If no task has this ID
            ConflictError: If the task is soft-deleted or completed
            InvalidArgumentError: If title or status is invalid
        """
        task = await self._load(task_id)

        if task.is_deleted:
            logger.warning(f"Rejected update of deleted task {task_id}")
            raise ConflictError("deleted tasks cannot be edited")
        if task.is_completed:
            logger.warning(f"Rejected update of completed task {task_id}")
            raise ConflictError("completed tasks cannot be edited")

        changes = task_data.model_dump(exclude_unset=True)

        if "title" in changes:
            changes["title"] = validate_title(changes["title"])

        if "status" in changes:
            new_status = validate_status(changes["status"])
            changes["status"] = new_status.value
            was_completed = task.status == TaskStatus.COMPLETED
            if new_status is TaskStatus.COMPLETED and not was_completed:
                changes["completed_at"] = self.clock.now()
            elif new_status is not TaskStatus.COMPLETED and was_completed:
                changes["completed_at"] = None

        if actor_id is not None:
            changes["updated_by"] = actor_id

        task = await self.repository.update(task, changes)
        logger.info(f"Updated task {task_id}: {sorted(changes)}")
        return task

    async def complete_task(self, task_id: int, actor_id: Optional[int] = None) -> Task:
        """
        Mark a task as completed

        Raises:
            NotFoundError: If no task has this ID
            ConflictError: If the task is soft-deleted or already completed
        """
        task = await self._load(task_id)

        if task.is_deleted:
            raise ConflictError("deleted tasks cannot be completed")
        if task.is_completed:
            raise ConflictError("task is already completed")

        changes = {
            "status": TaskStatus.COMPLETED.value,
            "completed_at": self.clock.now(),
        }
        if actor_id is not None:
            changes["updated_by"] = actor_id

        task = await self.repository.update(task, changes)
        logger.info(f"Completed task {task_id}")
        return task

    async def delete_task(self, task_id: int) -> Task:
        """
        Soft delete a task; status and history are kept

        Raises:
            NotFoundError: If no task has this ID
            ConflictError: If the task is already deleted
        """
        task = await self._load(task_id)
        if task.is_deleted:
            raise ConflictError("task is already deleted")

        task = await self.repository.delete(task, self.clock.now())
        logger.info(f"Soft deleted task {task_id}")

        await self._invalidate_statistics()
        return task

    async def restore_task(self, task_id: int) -> Task:
        """
        Restore a soft-deleted task

        Only soft-deleted tasks are considered, so an active task with this ID
        is reported as not found.

        Raises:
            NotFoundError: If no soft-deleted task has this ID
        """
        task = await self.repository.find_deleted_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Deleted task with ID {task_id} not found")

        task = await self.repository.restore(task)
        logger.info(f"Restored task {task_id}")

        await self._invalidate_statistics()
        return task

    async def list_tasks(self, params: TaskListParams) -> Page[TaskResponse]:
        """
        One page of tasks matching `params`

        Returns:
            Page envelope with total, page bounds and from/to positions
        """
        tasks, total = await self.repository.list_filtered(params)
        items = [TaskResponse.model_validate(task) for task in tasks]
        return Page[TaskResponse].build(items, total, params.page, params.per_page)

    async def _load_for_tagging(self, task_id: int, tag_ids: Iterable[int]) -> tuple[Task, list[int]]:
        task = await self._load(task_id)
        if task.is_deleted:
            raise ConflictError("tags cannot be changed on a deleted task")

        # Collapse duplicates, keep first-seen order for messages
        unique_ids = list(dict.fromkeys(tag_ids))
        if not unique_ids:
            raise InvalidArgumentError("tag_ids must not be empty")
        return task, unique_ids

    async def attach_tags(self, task_id: int, tag_ids: Iterable[int]) -> Task:
        """
        Attach tags to a task; already attached tags are left untouched

        Raises:
            NotFoundError: If the task or any of the tags does not exist
            ConflictError: If the task is soft-deleted
            InvalidArgumentError: If tag_ids is empty
        """
        task, unique_ids = await self._load_for_tagging(task_id, tag_ids)

        active_ids = await self.tag_repository.find_active_ids(unique_ids)
        missing = [tag_id for tag_id in unique_ids if tag_id not in active_ids]
        if missing:
            raise NotFoundError(f"Tags not found: {missing}")

        task = await self.repository.attach_tags(task, unique_ids)
        logger.info(f"Attached tags {unique_ids} to task {task_id}")
        return task

    async def detach_tags(self, task_id: int, tag_ids: Iterable[int]) -> Task:
        """
        Detach tags from a task; tags that are not attached are ignored

        Raises:
            NotFoundError: If the task does not exist
            ConflictError: If the task is soft-deleted
            InvalidArgumentError: If tag_ids is empty
        """
        task, unique_ids = await self._load_for_tagging(task_id, tag_ids)

        task = await self.repository.detach_tags(task, unique_ids)
        logger.info(f"Detached tags {unique_ids} from task {task_id}")
        return task
