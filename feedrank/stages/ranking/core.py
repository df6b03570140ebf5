"""
Stage B ranking: score candidates and sort them into a deterministic order.

Ordering is final_score desc, then published_at desc, then item id asc, so equal
scores never depend on retrieval order.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ...models.config import DEFAULT_CONFIG, RankingConfig
from ...models.item import Item
from ...models.profile import UserProfile
from ...models.scoring import ScoredCandidate
from .blended_scoring import score_candidate, score_non_personalized

logger = logging.getLogger(__name__)


def ranking_key(scored: ScoredCandidate) -> Tuple[float, float, str]:
    return (-scored.final_score, -scored.item.published_at.timestamp(), scored.item.id)


def engagement_key(scored: ScoredCandidate) -> Tuple[float, float, str]:
    return (-scored.engagement_score, -scored.item.published_at.timestamp(), scored.item.id)


def rank_personalized(
    candidates: Iterable[Tuple[Item, float]],
    profile: UserProfile,
    now: datetime,
    config: RankingConfig = DEFAULT_CONFIG,
) -> List[ScoredCandidate]:
    """
    Rank (item, similarity) pairs for a profile.

    Items blocked by the profile's negative signals are dropped before scoring.
    """
    scored: List[ScoredCandidate] = []
    blocked = 0
    for item, similarity in candidates:
        if profile.negative_signals.blocks(item):
            blocked += 1
            continue
        scored.append(score_candidate(item, profile, similarity, now, config))
    if blocked:
        logger.debug("[ranking] NEGATIVE_SIGNAL_DROPPED user=%s count=%s", profile.user_id, blocked)
    scored.sort(key=ranking_key)
    return scored


def rank_non_personalized(
    items: Iterable[Item],
    page: int,
    now: datetime,
    config: RankingConfig = DEFAULT_CONFIG,
    profile: Optional[UserProfile] = None,
) -> List[ScoredCandidate]:
    """
    Rank items by the page-aware recency/engagement blend.

    When a profile is known (e.g. index unavailable) its negative signals still apply.
    """
    scored = [
        score_non_personalized(item, page, now, config)
        for item in items
        if profile is None or not profile.negative_signals.blocks(item)
    ]
    scored.sort(key=ranking_key)
    return scored
