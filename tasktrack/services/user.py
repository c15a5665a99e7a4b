"""
User service layer
Read-only access to the public profiles of task and tag owners
"""
import logging
from typing import List, Optional

from tasktrack.core.exceptions import NotFoundError
from tasktrack.core.ports import UserRepository
from tasktrack.models.user import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def list_users(self, keyword: Optional[str] = None) -> List[User]:
        users = await self.repository.list_users(keyword.strip() if keyword else None)
        logger.debug(f"Listed {len(users)} users (keyword={keyword!r})")
        return users

    async def get_user(self, user_id: int) -> User:
        """
        Raises:
            NotFoundError: If no user has this ID
        """
        user = await self.repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        return user
