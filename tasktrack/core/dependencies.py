"""
Request dependencies: acting user and service wiring
Reference: https://fastapi.tiangolo.com/tutorial/dependencies/
"""
import logging
from functools import partial
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktrack.core.cache import Cache, get_cache
from tasktrack.core.database import after_commit, get_db
from tasktrack.repositories.tag import SqlAlchemyTagRepository
from tasktrack.repositories.task import SqlAlchemyTaskRepository
from tasktrack.repositories.user import SqlAlchemyUserRepository
from tasktrack.services.statistics import TaskStatisticsService
from tasktrack.services.tag import TagService
from tasktrack.services.task import TaskService
from tasktrack.services.user import UserService

logger = logging.getLogger(__name__)

ACTOR_HEADER = "X-User-Id"


async def get_actor_id(
    x_user_id: Optional[int] = Header(
        None,
        alias=ACTOR_HEADER,
        description="ID of the acting user, set by the upstream gateway",
    ),
) -> Optional[int]:
    """
    Acting user ID, if the request carries one.

    Authentication happens upstream; the gateway forwards the authenticated
    user's ID in the X-User-Id header.
    """
    return x_user_id


async def require_actor_id(actor_id: Optional[int] = Depends(get_actor_id)) -> int:
    """
    Acting user ID for endpoints that record an owner or updater

    Raises:
        HTTPException: 401 if the X-User-Id header is missing
    """
    if actor_id is None:
        logger.warning(f"Rejected request without {ACTOR_HEADER} header")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"{ACTOR_HEADER} header is required",
        )
    return actor_id


def get_statistics_service(
    db: AsyncSession = Depends(get_db),
    cache: Cache = Depends(get_cache),
) -> TaskStatisticsService:
    return TaskStatisticsService(
        SqlAlchemyTaskRepository(db),
        SqlAlchemyUserRepository(db),
        cache,
    )


def get_task_service(
    db: AsyncSession = Depends(get_db),
    statistics: TaskStatisticsService = Depends(get_statistics_service),
) -> TaskService:
    """
    TaskService bound to the request's session

    Shares the session with the statistics service (FastAPI resolves get_db
    once per request). Statistics eviction waits for get_db to commit.
    """
    return TaskService(
        SqlAlchemyTaskRepository(db),
        SqlAlchemyTagRepository(db),
        statistics,
        after_commit=partial(after_commit, db),
    )


def get_tag_service(db: AsyncSession = Depends(get_db)) -> TagService:
    return TagService(SqlAlchemyTagRepository(db))


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(SqlAlchemyUserRepository(db))
