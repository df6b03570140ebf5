"""
Score helpers — age, recency, and engagement utilities used by the ranking stages.
"""

from datetime import datetime, timezone
from typing import List, Sequence

from ..models.config import RankingConfig
from ..models.item import EngagementCounters

SECONDS_PER_DAY = 86400.0


def days_since(when: datetime, now: datetime) -> float:
    """Fractional days between when and now. Future timestamps count as age 0."""
    return max(0.0, (now - when).total_seconds() / SECONDS_PER_DAY)


def hours_since(when: datetime, now: datetime) -> float:
    return days_since(when, now) * 24.0


def decayed_weight(base_weight: float, days_old: float, decay_rate: float) -> float:
    """base_weight * decay_rate ** days_old."""
    return base_weight * (decay_rate ** days_old)


def recency_multiplier(days_old: float, steps: Sequence[Sequence[float]]) -> float:
    """
    Step-function boost by item age.

    steps is [(max_age_days, multiplier), ...] ascending; ages past the last step get 1.0.
    """
    for max_age, multiplier in steps:
        if days_old <= max_age:
            return float(multiplier)
    return 1.0


def recency_score(hours_old: float) -> float:
    """
    Recency in [0, 1] for the non-personalized path.

    Step taper for the first week, then linear to 0 at 30 days.
    """
    if hours_old <= 24:
        return 1.0
    if hours_old <= 48:
        return 0.8
    if hours_old <= 72:
        return 0.6
    if hours_old <= 168:
        return 0.4
    return max(0.0, 1.0 - hours_old / (24 * 30))


def engagement_score(counters: EngagementCounters, config: RankingConfig) -> float:
    """Weighted sum of capped, normalized views, likes, and completion rate (0–1)."""
    views = min(max(counters.views, 0), config.engagement_views_cap) / config.engagement_views_cap
    likes = min(max(counters.likes, 0), config.engagement_likes_cap) / config.engagement_likes_cap
    completion = min(1.0, max(0.0, counters.completion_rate))
    return (
        config.engagement_weight_views * views
        + config.engagement_weight_likes * likes
        + config.engagement_weight_completion * completion
    )


def _for_page(values: List, page: int):
    return values[min(max(page, 1), len(values)) - 1]


def page_recency_weight(page: int, config: RankingConfig) -> float:
    """Recency weight for the non-personalized blend; shrinks on deeper pages."""
    return _for_page(config.page_recency_weights, page)


def utc_now() -> datetime:
    """Default clock for the ranking stages; tests inject a fixed one."""
    return datetime.now(timezone.utc)
