"""
User profile model — interest vector plus source/category affinities.

Owned by the profile builder; recomputed from scratch on every rebuild and
cached by the profile cache as JSON.
"""

from datetime import datetime
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from .item import Item, ensure_utc


class NegativeSignals(BaseModel):
    """Sources and categories whose net decayed affinity is negative."""

    sources: Set[str] = Field(default_factory=set)
    categories: Set[str] = Field(default_factory=set)

    def blocks(self, item: Item) -> bool:
        """True if the item's source or any of its tags is a negative signal."""
        if item.source in self.sources:
            return True
        return any(tag in self.categories for tag in item.categories)


class UserProfile(BaseModel):
    """A user's interest profile as produced by the profile builder."""

    user_id: str
    interest_vector: List[float]
    source_affinity: Dict[str, float] = Field(default_factory=dict)
    category_affinity: Dict[str, float] = Field(default_factory=dict)
    negative_signals: NegativeSignals = Field(default_factory=NegativeSignals)
    last_computed_at: datetime
    recent_activity_count: int = 0
    interactions_used: int = 0
    cold_start: bool = False

    @field_validator("last_computed_at")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def dimension(self) -> int:
        return len(self.interest_vector)

    def max_source_affinity(self) -> Optional[float]:
        return max(self.source_affinity.values()) if self.source_affinity else None

    def max_category_affinity(self) -> Optional[float]:
        return max(self.category_affinity.values()) if self.category_affinity else None
