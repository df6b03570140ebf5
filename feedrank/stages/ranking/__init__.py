"""
Stage B ranking: blend similarity, affinity, recency, and engagement into a sorted list.

Public API: rank_personalized, rank_non_personalized, score_candidate.
- core: ordering and negative-signal filtering.
- blended_scoring: per-candidate scores.
"""

from .blended_scoring import category_score, score_candidate, score_non_personalized, source_score
from .core import engagement_key, rank_non_personalized, rank_personalized, ranking_key

__all__ = [
    "category_score",
    "engagement_key",
    "rank_non_personalized",
    "rank_personalized",
    "ranking_key",
    "score_candidate",
    "score_non_personalized",
    "source_score",
]
