"""
Interaction model — one user action on an item (view, like, save, dislike).

Interactions are append-only; the profile builder reads a bounded recent window
of them per type.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Union

from pydantic import BaseModel, field_validator

from .item import ensure_utc


class InteractionType(str, Enum):
    VIEW_PARTIAL = "view_partial"
    VIEW_COMPLETE = "view_complete"
    LIKE = "like"
    DISLIKE = "dislike"
    SAVE = "save"


# Explicit preference signals; recording one invalidates the cached profile.
WRITE_TYPES: FrozenSet[InteractionType] = frozenset(
    {InteractionType.LIKE, InteractionType.DISLIKE, InteractionType.SAVE}
)

VIEW_TYPES: FrozenSet[InteractionType] = frozenset(
    {InteractionType.VIEW_COMPLETE, InteractionType.VIEW_PARTIAL}
)


class Interaction(BaseModel):
    """A single user interaction with an item."""

    user_id: str
    item_id: str
    type: InteractionType
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


def ensure_interactions(
    items: List[Union[Dict, "Interaction"]],
) -> List["Interaction"]:
    """Convert list of dicts or Interactions to list of Interaction models."""
    return [Interaction.model_validate(i) if isinstance(i, dict) else i for i in items]
