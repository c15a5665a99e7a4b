"""
Paginated response envelope shared by list endpoints
"""
from math import ceil
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """
    One page of results plus the metadata needed to walk the rest

    `from`/`to` are 1-based positions of the first and last item of this page
    within the full result, or null when the page is empty.
    """
    items: List[T]
    total: int = Field(..., ge=0, description="Number of matching records")
    count: int = Field(..., ge=0, description="Number of records on this page")
    per_page: int = Field(..., ge=1, description="Page size")
    current_page: int = Field(..., ge=1, description="Current page number (1-indexed)")
    last_page: int = Field(..., ge=1, description="Last page number (1 when there are no results)")
    from_: Optional[int] = Field(None, alias="from", description="Position of the first item on this page")
    to: Optional[int] = Field(None, description="Position of the last item on this page")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def build(cls, items: List[T], total: int, page: int, per_page: int) -> "Page[T]":
        """Compute page metadata for `items` taken at offset (page - 1) * per_page."""
        offset = (page - 1) * per_page
        first = offset + 1 if items else None
        last = offset + len(items) if items else None
        return cls(
            items=items,
            total=total,
            count=len(items),
            per_page=per_page,
            current_page=page,
            last_page=max(ceil(total / per_page), 1),
            from_=first,
            to=last,
        )
