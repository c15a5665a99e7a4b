"""
Task statistics service
Per-user task counts served through a read-through cache
Reference: https://docs.pydantic.dev/latest/concepts/type_adapter/
"""
import logging
from typing import Any, List, Optional

from tasktrack.api.v1.schemas.statistics import (
    RecentTask,
    StatisticsParams,
    UserTaskStatistics,
    UserTaskStatisticsList,
)
from tasktrack.api.v1.schemas.user import UserPublic
from tasktrack.core.cache import Cache
from tasktrack.core.config import settings
from tasktrack.core.ports import TaskRepository, UserRepository

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "task_statistics_by_user"

# Limits evicted by clear_cache() without an argument; other limits expire by TTL
COMMON_LIMITS = (1, 3, 5, 10, 20, 50, 100)

RECENT_TASKS_PER_USER = 5


def cache_key(limit: int) -> str:
    return f"{CACHE_KEY_PREFIX}:{limit}"


async def evict_statistics(cache: Cache, limit: Optional[int] = None) -> List[str]:
    """
    Delete cached statistics entries

    Args:
        cache: Cache holding the entries
        limit: Evict only this limit's entry; None evicts every common limit

    Returns:
        The keys that were evicted
    """
    limits = (limit,) if limit is not None else COMMON_LIMITS
    keys = [cache_key(value) for value in limits]
    for key in keys:
        await cache.delete(key)
    logger.debug(f"Cleared statistics cache keys: {keys}")
    return keys


class TaskStatisticsService:
    """
    Service for the "top users by task count" report

    Counts include soft-deleted tasks. Results are cached per limit for
    ttl_seconds; task create, delete and restore evict the common limits.
    """

    def __init__(
        self,
        repository: TaskRepository,
        users: UserRepository,
        cache: Cache,
        ttl_seconds: Optional[int] = None,
    ):
        self.repository = repository
        self.users = users
        self.cache = cache
        self.ttl_seconds = settings.STATISTICS_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    async def top_users_by_task_count(self, limit: Any = None) -> List[UserTaskStatistics]:
        """
        Owners with the most tasks, busiest first

        Args:
            limit: Number of owners to return; clamped to [1, 100],
                anything unparseable means 5

        Returns:
            One record per owner with task_count and up to 5 recent tasks
        """
        limit = StatisticsParams(limit=limit).limit
        key = cache_key(limit)

        try:
            cached = await self.cache.get(key)
        except Exception as e:
            logger.warning(f"Failed to read statistics cache {key}: {type(e).__name__}: {e}")
            cached = None

        if cached is not None:
            logger.debug(f"Statistics cache hit: {key}")
            return UserTaskStatisticsList.validate_json(cached)

        records = await self._compute(limit)

        try:
            payload = UserTaskStatisticsList.dump_json(records).decode()
            await self.cache.set(key, payload, self.ttl_seconds)
        except Exception as e:
            logger.warning(f"Failed to store statistics cache {key}: {type(e).__name__}: {e}")

        return records

    async def _compute(self, limit: int) -> List[UserTaskStatistics]:
        counts = await self.repository.count_by_user(limit)
        user_ids = [user_id for user_id, _ in counts]
        users = await self.users.find_by_ids(user_ids)
        recent = await self.repository.recent_tasks_for_users(user_ids, RECENT_TASKS_PER_USER)

        records = []
        for user_id, task_count in counts:
            user = users.get(user_id)
            if user is None:
                logger.warning(f"Skipping statistics for unknown user {user_id}")
                continue
            records.append(
                UserTaskStatistics(
                    user=UserPublic.model_validate(user),
                    task_count=task_count,
                    recent_tasks=[RecentTask.model_validate(task) for task in recent.get(user_id, [])],
                )
            )
        return records

    async def clear_cache(self, limit: Optional[int] = None) -> List[str]:
        """Evict cached statistics; see evict_statistics()"""
        return await evict_statistics(self.cache, limit)
