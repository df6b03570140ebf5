"""
Scoring model — ScoredCandidate, an item with its ranking sub-scores.

Request-scoped; never cached or persisted.
"""

from enum import Enum

from pydantic import BaseModel

from .item import Item


class Provenance(str, Enum):
    """Why an item is on the page."""

    PERSONALIZED = "personalized"
    DIVERSITY = "diversity"
    TRENDING = "trending"


class ScoredCandidate(BaseModel):
    """An item with all its scoring components."""

    item: Item
    similarity: float = 0.0
    source_score: float = 0.0
    category_score: float = 0.0
    recency_multiplier: float = 1.0
    engagement_score: float = 0.0
    final_score: float = 0.0
    provenance: Provenance = Provenance.PERSONALIZED

    @property
    def item_id(self) -> str:
        return self.item.id

    def tagged(self, provenance: Provenance) -> "ScoredCandidate":
        """Copy with a different provenance tag."""
        return self.model_copy(update={"provenance": provenance})
