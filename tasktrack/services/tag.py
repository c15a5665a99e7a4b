"""
Tag service layer
"""
import logging
from typing import List, Optional

from tasktrack.api.v1.schemas.tag import TagCreate, TagListParams, TagUpdate
from tasktrack.core.clock import Clock, SystemClock
from tasktrack.core.exceptions import InvalidArgumentError, NotFoundError
from tasktrack.core.ports import TagRepository
from tasktrack.models.tag import Tag
from tasktrack.services.task import TITLE_MAX_LENGTH

logger = logging.getLogger(__name__)


def validate_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError("name is required")
    if len(name) > TITLE_MAX_LENGTH:
        raise InvalidArgumentError(f"name must not exceed {TITLE_MAX_LENGTH} characters")
    return name


class TagService:
    """
    Service for the tag catalogue

    Soft-deleted tags behave as missing for every operation.
    """

    def __init__(self, repository: TagRepository, clock: Optional[Clock] = None):
        self.repository = repository
        self.clock = clock or SystemClock()

    async def _load(self, tag_id: int) -> Tag:
        tag = await self.repository.find_by_id(tag_id)
        if tag is None:
            raise NotFoundError(f"Tag with ID {tag_id} not found")
        return tag

    async def create_tag(self, owner_id: int, tag_data: TagCreate) -> Tag:
        tag = await self.repository.create(
            {"user_id": owner_id, "name": validate_name(tag_data.name)}
        )
        logger.info(f"Created tag {tag.id} for user {owner_id}")
        return tag

    async def get_tag(self, tag_id: int) -> Tag:
        return await self._load(tag_id)

    async def list_tags(self, params: TagListParams) -> List[Tag]:
        return await self.repository.list_filtered(params)

    async def update_tag(
        self,
        tag_id: int,
        tag_data: TagUpdate,
        actor_id: Optional[int] = None,
    ) -> Tag:
        """
        Apply a partial update to an active tag

        Raises:
            NotFoundError: If the tag does not exist or is soft-deleted
            InvalidArgumentError: If the name is blank or too long
        """
        tag = await self._load(tag_id)

        changes = tag_data.model_dump(exclude_unset=True)
        if "name" in changes:
            changes["name"] = validate_name(changes["name"])
        if actor_id is not None:
            changes["updated_by"] = actor_id

        tag = await self.repository.update(tag, changes)
        logger.info(f"Updated tag {tag_id}: {sorted(changes)}")
        return tag

    async def delete_tag(self, tag_id: int) -> Tag:
        """
        Soft delete a tag; it disappears from every task's tag set

        Raises:
            NotFoundError: If the tag does not exist or is already deleted
        """
        tag = await self._load(tag_id)
        tag = await self.repository.delete(tag, self.clock.now())
        logger.info(f"Soft deleted tag {tag_id}")
        return tag
