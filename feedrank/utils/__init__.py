"""Shared utilities for scoring, similarity, and seeded randomness."""

from .rng import lcg, novelty_seed, seeded_insert, seeded_shuffle, string_hash
from .scores import (
    days_since,
    decayed_weight,
    engagement_score,
    hours_since,
    page_recency_weight,
    recency_multiplier,
    recency_score,
    utc_now,
)
from .similarity import (
    cosine_similarity,
    similarity_from_distance,
    weighted_mean,
)

__all__ = [
    "cosine_similarity",
    "days_since",
    "decayed_weight",
    "engagement_score",
    "hours_since",
    "lcg",
    "novelty_seed",
    "page_recency_weight",
    "recency_multiplier",
    "recency_score",
    "seeded_insert",
    "seeded_shuffle",
    "similarity_from_distance",
    "string_hash",
    "utc_now",
    "weighted_mean",
]
