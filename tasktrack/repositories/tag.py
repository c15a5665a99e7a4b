"""
SQLAlchemy tag repository
"""
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.api.v1.schemas.tag import TagListParams
from tasktrack.models.tag import Tag
from tasktrack.services.task_query import LIKE_ESCAPE, escape_like


class SqlAlchemyTagRepository:
    """Tag storage bound to one request's session; writes only flush"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _reload(self, tag_id: int) -> Tag:
        result = await self.db.execute(
            select(Tag)
            .where(Tag.id == tag_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def create(self, values: Mapping[str, Any]) -> Tag:
        tag = Tag(**values)
        self.db.add(tag)
        await self.db.flush()
        return await self._reload(tag.id)

    async def find_by_id(self, tag_id: int, include_deleted: bool = False) -> Optional[Tag]:
        query = select(Tag).where(Tag.id == tag_id)
        if not include_deleted:
            query = query.where(Tag.deleted_at.is_(None))
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def find_active_ids(self, tag_ids: Iterable[int]) -> set[int]:
        """Subset of `tag_ids` that name existing, non-deleted tags"""
        wanted = set(tag_ids)
        if not wanted:
            return set()
        result = await self.db.execute(
            select(Tag.id).where(Tag.id.in_(wanted), Tag.deleted_at.is_(None))
        )
        return set(result.scalars().all())

    async def list_filtered(self, params: TagListParams) -> list[Tag]:
        query = select(Tag).where(Tag.deleted_at.is_(None))

        if params.user_id is not None:
            query = query.where(Tag.user_id == params.user_id)

        if params.keyword:
            pattern = f"%{escape_like(params.keyword)}%"
            query = query.where(Tag.name.ilike(pattern, escape=LIKE_ESCAPE))

        sort_column = getattr(Tag, params.sort_by)
        if params.sort_direction == "asc":
            query = query.order_by(sort_column.asc(), Tag.id.asc())
        else:
            query = query.order_by(sort_column.desc(), Tag.id.desc())

        result = await self.db.execute(query.execution_options(populate_existing=True))
        return list(result.scalars().all())

    async def update(self, tag: Tag, values: Mapping[str, Any]) -> Tag:
        for field, value in values.items():
            setattr(tag, field, value)
        await self.db.flush()
        return await self._reload(tag.id)

    async def delete(self, tag: Tag, deleted_at: datetime) -> Tag:
        tag.deleted_at = deleted_at
        await self.db.flush()
        return await self._reload(tag.id)
