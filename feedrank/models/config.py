"""
Ranking configuration — profile, scoring, composer, and cache parameters.

RankingConfig defaults are defined here. The server may pass a dict
(e.g. from ranking_config.json if present); from_dict() merges it with these defaults.
"""

from typing import Dict, List

from pydantic import BaseModel, Field, model_validator

DEFAULT_INTERACTION_WEIGHTS: Dict[str, float] = {
    "save": 5.0,
    "like": 3.0,
    "view_complete": 2.0,
    "view_partial": 1.0,
    "dislike": -3.0,
}


class RankingConfig(BaseModel):
    """Configuration for the feed ranking engine."""

    # -------------------------------------------------------------------------
    # Index / embeddings
    # -------------------------------------------------------------------------

    # Dimension every Candidate Index is built with. Profiles of any other
    # dimension fall back to non-personalized ranking.
    index_dimension: int = 128

    # -------------------------------------------------------------------------
    # Profile Builder
    # -------------------------------------------------------------------------

    # Signed base weight per interaction type.
    interaction_weights: Dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_INTERACTION_WEIGHTS)
    )

    # Per-day multiplicative decay. 0.95 = ~5% per day.
    decay_rate: float = 0.95

    # Max interactions fetched per type (newest first).
    save_limit: int = 100
    like_limit: int = 100
    dislike_limit: int = 50
    view_limit: int = 150

    # Views are only read when fewer explicit positives (save/like) than this exist.
    view_fallback_min_explicit: int = 3

    # Interactions older than this are not read at all.
    profile_lookback_days: int = 90

    # Cold start: average embeddings of items from the user's top sources.
    cold_start_top_sources: int = 3
    cold_start_items_per_source: int = 20

    # -------------------------------------------------------------------------
    # Profile Cache (smart TTL)
    # ttl = short if activity >= high, medium if activity >= medium, else long
    # -------------------------------------------------------------------------

    activity_window_days: int = 7
    activity_count_cap: int = 50
    activity_high_threshold: int = 10
    activity_medium_threshold: int = 3
    ttl_short_seconds: int = 6 * 3600
    ttl_medium_seconds: int = 24 * 3600
    ttl_long_seconds: int = 7 * 24 * 3600

    # -------------------------------------------------------------------------
    # Hybrid scoring weights (must sum to 1.0)
    # base = w_sim * similarity + w_src * source + w_cat * category
    # final = base * recency_multiplier
    # -------------------------------------------------------------------------

    weight_similarity: float = 0.5
    weight_source: float = 0.3
    weight_category: float = 0.2

    # Step-function recency boost: [(max_age_days, multiplier), ...] ascending.
    recency_boost_steps: List[List[float]] = Field(
        default_factory=lambda: [[3, 1.5], [7, 1.3], [14, 1.1]]
    )

    # Engagement score = w_views * views_n + w_likes * likes_n + w_completion * completion
    engagement_weight_views: float = 0.3
    engagement_weight_likes: float = 0.2
    engagement_weight_completion: float = 0.5
    engagement_views_cap: int = 10_000
    engagement_likes_cap: int = 1_000

    # Non-personalized path: final = w(page) * recency + (1 - w(page)) * engagement.
    # Index 0 is page 1; the last entry applies to every deeper page.
    page_recency_weights: List[float] = Field(
        default_factory=lambda: [0.75, 0.65, 0.55, 0.45]
    )

    # -------------------------------------------------------------------------
    # Candidate pool / time windows
    # Page 1 starts at the first window, page 2 at the second, ...
    # Exhausted pools widen to the next window before giving up.
    # -------------------------------------------------------------------------

    time_windows_hours: List[int] = Field(default_factory=lambda: [72, 168, 336, 720])

    # Max candidates requested from the Candidate Index (before exclusions).
    candidate_pool_size: int = 300

    # Max items read for the trending pool.
    trending_pool_size: int = 200

    # -------------------------------------------------------------------------
    # Feed Composer
    # -------------------------------------------------------------------------

    main_ratio: float = 0.85
    diversity_ratio: float = 0.15
    trending_ratio: float = 0.10
    diversity_similarity_floor: float = 0.3
    exclusion_cap: int = 500

    # -------------------------------------------------------------------------
    # Request limits / timeouts
    # -------------------------------------------------------------------------

    default_limit: int = 20
    max_limit: int = 50
    collaborator_timeout_seconds: float = 3.0

    # Cursors older than this decode as "no cursor".
    cursor_max_age_seconds: int = 24 * 3600

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        total = self.weight_similarity + self.weight_source + self.weight_category
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")
        if not 0.0 < self.decay_rate <= 1.0:
            raise ValueError(f"decay_rate must be in (0, 1], got {self.decay_rate}")
        for name in ("main_ratio", "diversity_ratio", "trending_ratio"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")
        if not self.time_windows_hours or not self.page_recency_weights:
            raise ValueError("time_windows_hours and page_recency_weights must not be empty")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RankingConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        allowed = set(cls.model_fields)
        flat = {k: v for k, v in config_dict.items() if k in allowed}
        for group in ("index", "profile", "cache", "scoring", "composer", "limits"):
            if group in config_dict:
                flat.update(config_dict[group])
        if "interaction_weights" in flat:
            # Partial overrides keep the default weight for unlisted types
            weights = dict(DEFAULT_INTERACTION_WEIGHTS)
            weights.update(flat["interaction_weights"])
            flat["interaction_weights"] = weights
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = RankingConfig()
