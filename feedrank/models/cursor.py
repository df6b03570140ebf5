"""
Cursor state — what an opaque pagination token carries between requests.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .feed import FeedStrategy
from .item import ensure_utc


class CursorState(BaseModel):
    """
    Pagination state for stateless infinite scroll.

    excluded_ids is ordered oldest first so FIFO eviction drops the oldest entries.
    page is the freshness-decay counter: it selects the starting time window and
    the recency weight for the next request.
    """

    last_served_id: Optional[str] = None
    excluded_ids: List[str] = Field(default_factory=list)
    page: int = 1
    strategy: FeedStrategy = FeedStrategy.PERSONALIZED
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("page")
    @classmethod
    def _positive_page(cls, value: int) -> int:
        if value < 1:
            raise ValueError(f"page must be >= 1, got {value}")
        return value
