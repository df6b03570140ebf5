"""Data models for the ranking engine."""

from .config import DEFAULT_CONFIG, RankingConfig
from .cursor import CursorState
from .feed import FeedItem, FeedResult, FeedStatus, FeedStrategy
from .interaction import (
    VIEW_TYPES,
    WRITE_TYPES,
    Interaction,
    InteractionType,
    ensure_interactions,
)
from .item import Embedding, EngagementCounters, Item, ensure_items
from .profile import NegativeSignals, UserProfile
from .scoring import Provenance, ScoredCandidate

__all__ = [
    "DEFAULT_CONFIG",
    "CursorState",
    "Embedding",
    "EngagementCounters",
    "FeedItem",
    "FeedResult",
    "FeedStatus",
    "FeedStrategy",
    "Interaction",
    "InteractionType",
    "Item",
    "NegativeSignals",
    "Provenance",
    "RankingConfig",
    "ScoredCandidate",
    "UserProfile",
    "VIEW_TYPES",
    "WRITE_TYPES",
    "ensure_interactions",
    "ensure_items",
]
