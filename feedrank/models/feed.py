"""
Feed request/result models — what FeedService.get_feed returns to the routing layer.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from .scoring import Provenance, ScoredCandidate


class FeedStrategy(str, Enum):
    PERSONALIZED = "personalized"
    TRENDING = "trending"


class FeedStatus(str, Enum):
    """ok = a valid page (possibly empty); unavailable = the system cannot serve content."""

    OK = "ok"
    UNAVAILABLE = "unavailable"


class FeedItem(BaseModel):
    """View model for one item on a feed page."""

    id: str
    item_type: str
    source: str
    categories: List[str] = Field(default_factory=list)
    published_at: datetime
    provenance: Provenance
    position: int
    similarity: float
    source_score: float
    category_score: float
    recency_multiplier: float
    engagement_score: float
    final_score: float

    @classmethod
    def from_scored(cls, scored: ScoredCandidate, position: int) -> "FeedItem":
        item = scored.item
        return cls(
            id=item.id,
            item_type=item.item_type,
            source=item.source,
            categories=list(item.categories),
            published_at=item.published_at,
            provenance=scored.provenance,
            position=position,
            similarity=round(scored.similarity, 4),
            source_score=round(scored.source_score, 4),
            category_score=round(scored.category_score, 4),
            recency_multiplier=scored.recency_multiplier,
            engagement_score=round(scored.engagement_score, 4),
            final_score=round(scored.final_score, 4),
        )


class FeedResult(BaseModel):
    """One page of feed plus the continuation cursor."""

    items: List[FeedItem] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    has_more: bool = False
    status: FeedStatus = FeedStatus.OK
    strategy_used: FeedStrategy = FeedStrategy.TRENDING
    page: int = 1

    @classmethod
    def empty(cls, strategy: FeedStrategy, page: int = 1) -> "FeedResult":
        return cls(strategy_used=strategy, page=page)

    @classmethod
    def unavailable(cls, strategy: FeedStrategy, page: int = 1) -> "FeedResult":
        return cls(status=FeedStatus.UNAVAILABLE, strategy_used=strategy, page=page)
