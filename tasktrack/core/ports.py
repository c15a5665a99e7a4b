"""
Persistence ports used by the service layer

Services depend on these Protocols; the SQLAlchemy implementations live in
tasktrack/repositories and are bound to a request's AsyncSession.
"""
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from tasktrack.api.v1.schemas.tag import TagListParams
from tasktrack.api.v1.schemas.task import TaskListParams
from tasktrack.models.tag import Tag
from tasktrack.models.task import Task
from tasktrack.models.user import User


class TaskRepository(Protocol):
    """Task storage with soft-delete tombstones."""

    async def create(self, values: Mapping[str, Any]) -> Task: ...

    async def find_by_id(self, task_id: int, include_deleted: bool = True) -> Optional[Task]: ...

    async def find_deleted_by_id(self, task_id: int) -> Optional[Task]: ...

    async def update(self, task: Task, values: Mapping[str, Any]) -> Task: ...

    async def delete(self, task: Task, deleted_at: datetime) -> Task: ...

    async def restore(self, task: Task) -> Task: ...

    async def list_filtered(self, params: TaskListParams) -> tuple[list[Task], int]:
        """Return one page of matching tasks and the total match count."""
        ...

    async def attach_tags(self, task: Task, tag_ids: Iterable[int]) -> Task: ...

    async def detach_tags(self, task: Task, tag_ids: Iterable[int]) -> Task: ...

    async def count_by_user(self, limit: int) -> list[tuple[int, int]]:
        """(user_id, task_count) pairs, busiest owners first."""
        ...

    async def recent_tasks_for_users(
        self, user_ids: Sequence[int], per_user: int
    ) -> dict[int, list[Task]]: ...


class TagRepository(Protocol):
    """Tag storage with soft-delete tombstones."""

    async def create(self, values: Mapping[str, Any]) -> Tag: ...

    async def find_by_id(self, tag_id: int, include_deleted: bool = False) -> Optional[Tag]: ...

    async def find_active_ids(self, tag_ids: Iterable[int]) -> set[int]: ...

    async def list_filtered(self, params: TagListParams) -> list[Tag]: ...

    async def update(self, tag: Tag, values: Mapping[str, Any]) -> Tag: ...

    async def delete(self, tag: Tag, deleted_at: datetime) -> Tag: ...


class UserRepository(Protocol):
    async def find_by_ids(self, user_ids: Iterable[int]) -> dict[int, User]: ...

    async def find_by_id(self, user_id: int) -> Optional[User]: ...

    async def list_users(self, keyword: Optional[str] = None) -> list[User]: ...
