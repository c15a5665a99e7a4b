"""
SQLAlchemy task repository
Reference: https://docs.sqlalchemy.org/en/20/orm/queryguide/
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.api.v1.schemas.task import TaskListParams
from tasktrack.models.task import Task
from tasktrack.models.task_tag import TaskTag
from tasktrack.services.task_query import build_count_statement, build_task_statement

logger = logging.getLogger(__name__)


class SqlAlchemyTaskRepository:
    """
    Task storage bound to one request's session

    Writes only flush: the get_db() dependency owns commit/rollback.
    After every write the row is read back with populate_existing so server
    defaults, onupdate timestamps and eager relationships are current without
    triggering lazy IO.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _reload(self, task_id: int) -> Task:
        result = await self.db.execute(
            select(Task)
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def create(self, values: Mapping[str, Any]) -> Task:
        task = Task(**values)
        self.db.add(task)
        # Flush to get database-generated ID (without committing)
        await self.db.flush()
        return await self._reload(task.id)

    async def find_by_id(self, task_id: int, include_deleted: bool = True) -> Optional[Task]:
        query = select(Task).where(Task.id == task_id)
        if not include_deleted:
            query = query.where(Task.deleted_at.is_(None))
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def find_deleted_by_id(self, task_id: int) -> Optional[Task]:
        result = await self.db.execute(
            select(Task)
            .where(Task.id == task_id, Task.deleted_at.is_not(None))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def update(self, task: Task, values: Mapping[str, Any]) -> Task:
        for field, value in values.items():
            setattr(task, field, value)
        await self.db.flush()
        return await self._reload(task.id)

    async def delete(self, task: Task, deleted_at: datetime) -> Task:
        task.deleted_at = deleted_at
        await self.db.flush()
        return await self._reload(task.id)

    async def restore(self, task: Task) -> Task:
        task.deleted_at = None
        await self.db.flush()
        return await self._reload(task.id)

    async def list_filtered(self, params: TaskListParams) -> tuple[list[Task], int]:
        total = (await self.db.execute(build_count_statement(params))).scalar_one()
        result = await self.db.execute(
            build_task_statement(params).execution_options(populate_existing=True)
        )
        return list(result.scalars().all()), total

    async def attach_tags(self, task: Task, tag_ids: Iterable[int]) -> Task:
        wanted = set(tag_ids)
        if wanted:
            result = await self.db.execute(
                select(TaskTag.tag_id).where(
                    TaskTag.task_id == task.id,
                    TaskTag.tag_id.in_(wanted),
                )
            )
            # Existing pairs are left alone so they keep their timestamps
            missing = wanted - set(result.scalars().all())
            self.db.add_all(TaskTag(task_id=task.id, tag_id=tag_id) for tag_id in sorted(missing))
            await self.db.flush()
            logger.debug(f"Attached {len(missing)} new tag(s) to task {task.id}")
        return await self._reload(task.id)

    async def detach_tags(self, task: Task, tag_ids: Iterable[int]) -> Task:
        wanted = set(tag_ids)
        if wanted:
            await self.db.execute(
                delete(TaskTag).where(
                    TaskTag.task_id == task.id,
                    TaskTag.tag_id.in_(wanted),
                )
            )
            await self.db.flush()
        return await self._reload(task.id)

    async def count_by_user(self, limit: int) -> list[tuple[int, int]]:
        """
        Task count per owner, soft-deleted tasks included

        Ordered by count descending, ties broken by ascending user id.
        """
        task_count = func.count(Task.id).label("task_count")
        result = await self.db.execute(
            select(Task.user_id, task_count)
            .group_by(Task.user_id)
            .order_by(task_count.desc(), Task.user_id.asc())
            .limit(limit)
        )
        return [(row.user_id, row.task_count) for row in result.all()]

    async def recent_tasks_for_users(
        self, user_ids: Sequence[int], per_user: int
    ) -> dict[int, list[Task]]:
        """
        Latest `per_user` tasks of each owner (created_at desc, id desc)

        Uses ROW_NUMBER() partitioned by owner so all owners are served by one
        query.
        Reference: https://docs.sqlalchemy.org/en/20/tutorial/data_select.html#using-window-functions
        """
        if not user_ids:
            return {}

        position = (
            func.row_number()
            .over(
                partition_by=Task.user_id,
                order_by=(Task.created_at.desc(), Task.id.desc()),
            )
            .label("position")
        )
        ranked = (
            select(Task.id, position)
            .where(Task.user_id.in_(user_ids))
            .subquery()
        )
        result = await self.db.execute(
            select(Task)
            .join(ranked, Task.id == ranked.c.id)
            .where(ranked.c.position <= per_user)
            .order_by(Task.user_id, ranked.c.position)
        )

        grouped: dict[int, list[Task]] = defaultdict(list)
        for task in result.scalars().all():
            grouped[task.user_id].append(task)
        return dict(grouped)
