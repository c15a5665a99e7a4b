"""
Public user profiles
"""
import pytest

from tasktrack.core.exceptions import NotFoundError
from tasktrack.models import User
from tasktrack.repositories.user import SqlAlchemyUserRepository
from tasktrack.services.user import UserService


@pytest.fixture
def user_service(db_session) -> UserService:
    return UserService(SqlAlchemyUserRepository(db_session))


@pytest.mark.asyncio
async def test_list_users_ordered_by_id(user_service, users):
    listed = await user_service.list_users()
    assert [user.name for user in listed] == ["Alice", "Bob", "Carol"]


@pytest.mark.asyncio
async def test_keyword_matches_name_or_email(user_service, db_session, users):
    db_session.add(User(id=4, name="Dave", email="dave_bob@example.com", password_hash="x"))
    await db_session.flush()

    assert [user.id for user in await user_service.list_users("BOB")] == [2, 4]
    assert [user.id for user in await user_service.list_users("  carol ")] == [3]
    assert [user.id for user in await user_service.list_users("e_b")] == [4]
    assert await user_service.list_users("%") == []


@pytest.mark.asyncio
async def test_get_unknown_user_is_not_found(user_service, users):
    assert (await user_service.get_user(2)).email == "bob@example.com"
    with pytest.raises(NotFoundError):
        await user_service.get_user(99)
