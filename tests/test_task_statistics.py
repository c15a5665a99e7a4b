"""
Per-user task statistics and their cache
"""
import json
from datetime import datetime
from functools import partial

import pytest

from tasktrack.api.v1.schemas.task import TaskCreate
from tasktrack.core.cache import InMemoryCache
from tasktrack.core.config import settings
from tasktrack.core.database import after_commit, run_after_commit
from tasktrack.repositories.task import SqlAlchemyTaskRepository
from tasktrack.repositories.user import SqlAlchemyUserRepository
from tasktrack.services.statistics import COMMON_LIMITS, TaskStatisticsService, cache_key
from tasktrack.services.task import TaskService

from tests.conftest import FailingCache


class CountingTaskRepository(SqlAlchemyTaskRepository):
    """Counts how often the aggregate query runs"""

    def __init__(self, db):
        super().__init__(db)
        self.aggregations = 0

    async def count_by_user(self, limit):
        self.aggregations += 1
        return await super().count_by_user(limit)


async def seed(task_repository, counts):
    """Create counts[user_id] tasks for each user"""
    for user_id, count in counts.items():
        for i in range(count):
            await task_repository.create({"user_id": user_id, "title": f"u{user_id} #{i}", "status": 0})


@pytest.mark.asyncio
async def test_top_users_ordered_by_task_count(statistics_service, task_repository, users):
    await seed(task_repository, {1: 5, 2: 10, 3: 3})

    records = await statistics_service.top_users_by_task_count(2)

    assert [(r.user.id, r.task_count) for r in records] == [(2, 10), (1, 5)]
    assert records[0].user.name == "Bob"
    assert records[0].user.email == "bob@example.com"


@pytest.mark.asyncio
async def test_equal_counts_break_ties_by_user_id(statistics_service, task_repository, users):
    await seed(task_repository, {3: 2, 2: 2, 1: 1})

    records = await statistics_service.top_users_by_task_count(3)

    assert [r.user.id for r in records] == [2, 3, 1]


@pytest.mark.asyncio
async def test_soft_deleted_tasks_are_counted(statistics_service, task_service, task_repository, users):
    await seed(task_repository, {1: 2})
    extra = await task_service.create_task(1, TaskCreate(title="later deleted"))
    await task_service.delete_task(extra.id)

    records = await statistics_service.top_users_by_task_count(5)

    assert records[0].task_count == 3


@pytest.mark.asyncio
async def test_recent_tasks_are_latest_five(statistics_service, task_repository, users):
    for day in range(1, 8):
        await task_repository.create(
            {"user_id": 1, "title": f"day {day}", "status": 0, "created_at": datetime(2025, 1, day)}
        )

    records = await statistics_service.top_users_by_task_count(1)

    assert records[0].task_count == 7
    assert [t.title for t in records[0].recent_tasks] == ["day 7", "day 6", "day 5", "day 4", "day 3"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw, expected",
    [(None, 5), ("abc", 5), (0, 1), (-4, 1), (3, 3), ("20", 20), (1000, 100)],
)
async def test_limit_is_normalized(statistics_service, cache, users, raw, expected):
    await statistics_service.top_users_by_task_count(raw)
    assert cache_key(expected) in cache


@pytest.mark.asyncio
async def test_cached_result_is_reused(db_session, cache, task_repository, users):
    repository = CountingTaskRepository(db_session)
    service = TaskStatisticsService(repository, SqlAlchemyUserRepository(db_session), cache)
    await seed(task_repository, {1: 2})

    first = await service.top_users_by_task_count(5)
    second = await service.top_users_by_task_count(5)

    assert repository.aggregations == 1
    assert first == second
    payload = json.loads(await cache.get(cache_key(5)))
    assert payload[0]["task_count"] == 2


@pytest.mark.asyncio
async def test_create_delete_restore_evict_common_limits(task_service, statistics_service, cache, users):
    task = await task_service.create_task(1, TaskCreate(title="first"))

    for mutate in (
        lambda: task_service.create_task(2, TaskCreate(title="second")),
        lambda: task_service.delete_task(task.id),
        lambda: task_service.restore_task(task.id),
    ):
        for limit in COMMON_LIMITS:
            await statistics_service.top_users_by_task_count(limit)
        assert all(cache_key(limit) in cache for limit in COMMON_LIMITS)

        await mutate()

        assert not any(cache_key(limit) in cache for limit in COMMON_LIMITS)


@pytest.mark.asyncio
async def test_uncommon_limit_waits_for_ttl(task_service, statistics_service, cache, users):
    await statistics_service.top_users_by_task_count(7)
    await task_service.create_task(1, TaskCreate(title="new"))

    assert cache_key(7) in cache


@pytest.mark.asyncio
async def test_update_and_complete_keep_cache(task_service, statistics_service, cache, users):
    task = await task_service.create_task(1, TaskCreate(title="T"))
    await statistics_service.top_users_by_task_count(5)

    await task_service.complete_task(task.id)

    assert cache_key(5) in cache


@pytest.mark.asyncio
async def test_clear_cache_single_limit(statistics_service, cache, users):
    await statistics_service.top_users_by_task_count(5)
    await statistics_service.top_users_by_task_count(10)

    evicted = await statistics_service.clear_cache(10)

    assert evicted == [cache_key(10)]
    assert cache_key(5) in cache
    assert cache_key(10) not in cache


@pytest.mark.asyncio
async def test_cache_entries_expire():
    now = [1000.0]
    cache = InMemoryCache(clock=lambda: now[0])

    await cache.set("k", "v", ttl_seconds=600)
    assert await cache.get("k") == "v"

    now[0] += 600
    assert await cache.get("k") is None


@pytest.mark.asyncio
async def test_cache_failure_does_not_fail_mutations_or_reads(
    db_session, task_repository, tag_repository, clock, users
):
    failing = FailingCache()
    statistics = TaskStatisticsService(task_repository, SqlAlchemyUserRepository(db_session), failing)
    service = TaskService(task_repository, tag_repository, statistics, clock)

    task = await service.create_task(1, TaskCreate(title="T"))
    deleted = await service.delete_task(task.id)
    # delete and restore hand back the same identity-mapped Task
    assert deleted.deleted_at is not None

    restored = await service.restore_task(task.id)
    records = await statistics.top_users_by_task_count(5)

    assert restored.deleted_at is None
    assert records[0].task_count == 1
    assert failing.calls > 0


@pytest.mark.asyncio
async def test_eviction_waits_for_commit(
    db_session, task_repository, tag_repository, statistics_service, cache, clock, users
):
    service = TaskService(
        task_repository,
        tag_repository,
        statistics_service,
        clock,
        after_commit=partial(after_commit, db_session),
    )

    await service.create_task(1, TaskCreate(title="T"))
    # A concurrent reader still sees the old committed data and caches it
    await cache.set(cache_key(5), "[]", ttl_seconds=600)
    assert cache_key(5) in cache

    await db_session.commit()
    await run_after_commit(db_session)

    assert not any(cache_key(limit) in cache for limit in COMMON_LIMITS)
    records = await statistics_service.top_users_by_task_count(5)
    assert [(r.user.id, r.task_count) for r in records] == [(1, 1)]


@pytest.mark.asyncio
async def test_zero_ttl_is_kept(db_session, task_repository, users):
    user_repository = SqlAlchemyUserRepository(db_session)

    assert TaskStatisticsService(task_repository, user_repository, InMemoryCache(), ttl_seconds=0).ttl_seconds == 0
    default = TaskStatisticsService(task_repository, user_repository, InMemoryCache())
    assert default.ttl_seconds == settings.STATISTICS_CACHE_TTL_SECONDS
