"""
feedrank — personalized content-ranking engine.

Single entry point for the ranking package:
- models/: RankingConfig, Item, Interaction, UserProfile, CursorState, FeedResult
- stages/: profile builder + cache, candidate index + pool (Stage A),
  ranking (Stage B), composer, cursor codec
- embedding/: EmbeddingAdapter (index-dimension vectors)
- service: FeedService, which ties the stages to their collaborators
"""

from .embedding import EmbeddingAdapter
from .errors import (
    CollaboratorTimeoutError,
    FeedRankError,
    IncompatibleEmbeddingError,
    IndexUnavailableError,
)
from .interfaces import DimensionReducer, InteractionStore, ItemCorpus, KeyValueCache
from .models import (
    DEFAULT_CONFIG,
    FeedResult,
    FeedStatus,
    FeedStrategy,
    Interaction,
    InteractionType,
    Item,
    RankingConfig,
    UserProfile,
)
from .service import FeedService
from .stages import CandidateIndexRegistry, InMemoryCandidateIndex

__version__ = "0.1.0"

__all__ = [
    "CandidateIndexRegistry",
    "CollaboratorTimeoutError",
    "DEFAULT_CONFIG",
    "DimensionReducer",
    "EmbeddingAdapter",
    "FeedRankError",
    "FeedResult",
    "FeedService",
    "FeedStatus",
    "FeedStrategy",
    "InMemoryCandidateIndex",
    "IncompatibleEmbeddingError",
    "IndexUnavailableError",
    "Interaction",
    "InteractionStore",
    "InteractionType",
    "Item",
    "ItemCorpus",
    "KeyValueCache",
    "RankingConfig",
    "UserProfile",
]
