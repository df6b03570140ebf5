"""
Per-candidate blended scoring.

Personalized:
    base  = w_sim * similarity + w_src * source_score + w_cat * category_score
    final = base * recency_multiplier

Non-personalized (anonymous, no profile, or index unavailable):
    final = w(page) * recency_score + (1 - w(page)) * engagement_score
"""

from datetime import datetime

from ...models.config import RankingConfig
from ...models.item import Item
from ...models.profile import UserProfile
from ...models.scoring import Provenance, ScoredCandidate
from ...utils.scores import (
    days_since,
    engagement_score,
    hours_since,
    page_recency_weight,
    recency_multiplier,
    recency_score,
)


def source_score(item: Item, profile: UserProfile) -> float:
    """Source affinity normalized by the user's strongest source; 0 when unknown."""
    top = profile.max_source_affinity()
    if not top or top <= 0:
        return 0.0
    return max(0.0, profile.source_affinity.get(item.source, 0.0)) / top


def category_score(item: Item, profile: UserProfile) -> float:
    """Mean normalized affinity over the item's tags the user has positive affinity for."""
    top = profile.max_category_affinity()
    if not top or top <= 0:
        return 0.0
    matched = [
        profile.category_affinity[tag] / top
        for tag in item.categories
        if profile.category_affinity.get(tag, 0.0) > 0
    ]
    return sum(matched) / len(matched) if matched else 0.0


def score_candidate(
    item: Item,
    profile: UserProfile,
    similarity: float,
    now: datetime,
    config: RankingConfig,
) -> ScoredCandidate:
    """Score one candidate against a profile. similarity is already clamped to [0, 1]."""
    sim = min(1.0, max(0.0, similarity))
    src = source_score(item, profile)
    cat = category_score(item, profile)
    boost = recency_multiplier(days_since(item.published_at, now), config.recency_boost_steps)
    base = (
        config.weight_similarity * sim
        + config.weight_source * src
        + config.weight_category * cat
    )
    return ScoredCandidate(
        item=item,
        similarity=sim,
        source_score=src,
        category_score=cat,
        recency_multiplier=boost,
        engagement_score=engagement_score(item.counters, config),
        final_score=base * boost,
        provenance=Provenance.PERSONALIZED,
    )


def score_non_personalized(
    item: Item,
    page: int,
    now: datetime,
    config: RankingConfig,
) -> ScoredCandidate:
    """Recency/engagement blend; deeper pages lean on engagement."""
    w = page_recency_weight(page, config)
    rec = recency_score(hours_since(item.published_at, now))
    eng = engagement_score(item.counters, config)
    return ScoredCandidate(
        item=item,
        recency_multiplier=1.0,
        engagement_score=eng,
        final_score=w * rec + (1.0 - w) * eng,
        provenance=Provenance.TRENDING,
    )
