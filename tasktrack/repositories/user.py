"""
SQLAlchemy user repository
Users are managed elsewhere; this side only reads public profiles.
"""
from typing import Iterable, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.models.user import User
from tasktrack.services.task_query import LIKE_ESCAPE, escape_like


class SqlAlchemyUserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_ids(self, user_ids: Iterable[int]) -> dict[int, User]:
        wanted = set(user_ids)
        if not wanted:
            return {}
        result = await self.db.execute(select(User).where(User.id.in_(wanted)))
        return {user.id: user for user in result.scalars().all()}

    async def find_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def list_users(self, keyword: Optional[str] = None) -> list[User]:
        """Users ordered by ID; `keyword` matches name or email, case-insensitively."""
        query = select(User)
        if keyword:
            pattern = f"%{escape_like(keyword)}%"
            query = query.where(
                or_(
                    User.name.ilike(pattern, escape=LIKE_ESCAPE),
                    User.email.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        result = await self.db.execute(query.order_by(User.id.asc()))
        return list(result.scalars().all())
