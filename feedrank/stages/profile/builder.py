"""
Profile Builder — turns a user's recent interactions into an interest profile.

interest_vector = Σ(emb_i * w_i) / Σ(w_i) over positive-weight interactions, where
w_i = base_weight(type) * decay_rate ** days_old. Dislikes never enter the average
but do subtract from source/category affinity; keys that end non-positive after a
negative contribution become negative signals.

Any store failure returns None: the caller serves the non-personalized feed.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List, Optional, Set, Tuple

import numpy as np

from ...embedding import EmbeddingAdapter
from ...interfaces import InteractionStore, ItemCorpus
from ...models.config import DEFAULT_CONFIG, RankingConfig
from ...models.interaction import VIEW_TYPES, Interaction, InteractionType
from ...models.item import Item
from ...models.profile import NegativeSignals, UserProfile
from ...utils.scores import days_since, decayed_weight, utc_now
from ...utils.similarity import weighted_mean

logger = logging.getLogger(__name__)


class _Affinity:
    """Running signed totals per key, remembering which keys saw a negative contribution."""

    def __init__(self):
        self.totals: Dict[str, float] = defaultdict(float)
        self.penalized: Set[str] = set()

    def add(self, key: str, weight: float) -> None:
        if not key:
            return
        self.totals[key] += weight
        if weight < 0:
            self.penalized.add(key)

    def split(self) -> Tuple[Dict[str, float], Set[str]]:
        """(positive affinity map, negative keys)."""
        negatives = {k for k in self.penalized if self.totals[k] <= 0}
        positives = {k: v for k, v in self.totals.items() if v > 0 and k not in negatives}
        return positives, negatives


class ProfileBuilder:
    """Builds UserProfile objects from the interaction log and item corpus."""

    def __init__(
        self,
        interactions: InteractionStore,
        corpus: ItemCorpus,
        adapter: EmbeddingAdapter,
        config: RankingConfig = DEFAULT_CONFIG,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.interactions = interactions
        self.corpus = corpus
        self.adapter = adapter
        self.config = config
        self.clock = clock

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _fetch(self, user_id: str, types, limit: int) -> List[Interaction]:
        return self.interactions.find_recent(
            user_id, list(types), limit, self.config.profile_lookback_days
        )

    def _fetch_signals(self, user_id: str) -> List[Interaction]:
        """Saves, likes, dislikes; views only when explicit positives are scarce."""
        cfg = self.config
        saves = self._fetch(user_id, [InteractionType.SAVE], cfg.save_limit)
        likes = self._fetch(user_id, [InteractionType.LIKE], cfg.like_limit)
        dislikes = self._fetch(user_id, [InteractionType.DISLIKE], cfg.dislike_limit)
        signals = saves + likes + dislikes
        if len(saves) + len(likes) < cfg.view_fallback_min_explicit:
            views = self._fetch(user_id, sorted(VIEW_TYPES, key=lambda t: t.value), cfg.view_limit)
            logger.debug(
                "[profile] VIEW_FALLBACK user=%s explicit=%s views=%s",
                user_id, len(saves) + len(likes), len(views),
            )
            signals += views
        return signals

    def _recent_activity_count(self, user_id: str, signals: List[Interaction], now: datetime) -> int:
        cfg = self.config
        try:
            recent = self.interactions.find_recent(
                user_id, list(InteractionType), cfg.activity_count_cap, cfg.activity_window_days
            )
            return min(len(recent), cfg.activity_count_cap)
        except Exception as e:
            logger.warning("[profile] ACTIVITY_COUNT_FAILED user=%s err=%s", user_id, e)
            window = [i for i in signals if days_since(i.timestamp, now) <= cfg.activity_window_days]
            return min(len(window), cfg.activity_count_cap)

    # ------------------------------------------------------------------
    # Cold start
    # ------------------------------------------------------------------

    def _cold_start_vector(self, source_affinity: Dict[str, float]) -> Optional[List[float]]:
        """Plain mean of item vectors from the user's top-weighted sources."""
        cfg = self.config
        top_sources = [
            src for src, _ in sorted(source_affinity.items(), key=lambda kv: (-kv[1], kv[0]))
        ][: cfg.cold_start_top_sources]
        if not top_sources:
            return None
        items = self.corpus.find_by_sources(top_sources, cfg.cold_start_items_per_source)
        vectors = [v for v in (self.adapter.try_vector_for(i) for i in items) if v is not None]
        if not vectors:
            return None
        return list(np.mean(np.asarray(vectors, dtype=float), axis=0))

    # ------------------------------------------------------------------
    # Public entry point
    # ------------------------------------------------------------------

    def build_profile(self, user_id: str) -> Optional[UserProfile]:
        """
        Build a fresh profile for user_id.

        Returns None when the user has no usable positive signal or when the
        interaction store / item corpus fails.
        """
        now = self.clock()
        cfg = self.config

        # --- 1. Fetch interactions and their items ---
        try:
            signals = self._fetch_signals(user_id)
            if not signals:
                return None
            ids = list(dict.fromkeys(i.item_id for i in signals))
            item_by_id: Dict[str, Item] = {it.id: it for it in self.corpus.find_by_ids(ids)}
        except Exception as e:
            logger.warning("[profile] PROFILE_FETCH_FAILED user=%s err=%s", user_id, e)
            return None

        # --- 2. Decay weights, accumulate affinities, collect positive vectors ---
        sources = _Affinity()
        categories = _Affinity()
        vectors: List[np.ndarray] = []
        weights: List[float] = []
        used = 0
        missing = 0
        has_positive = False
        for interaction in signals:
            item = item_by_id.get(interaction.item_id)
            if item is None:
                missing += 1
                continue
            base = cfg.interaction_weights.get(interaction.type.value, 0.0)
            w = decayed_weight(base, days_since(interaction.timestamp, now), cfg.decay_rate)
            if w == 0:
                continue
            used += 1
            sources.add(item.source, w)
            for tag in item.categories:
                categories.add(tag, w)
            if w > 0:
                has_positive = True
                vec = self.adapter.try_vector_for(item)
                if vec is not None:
                    vectors.append(np.asarray(vec, dtype=float))
                    weights.append(w)
        if missing:
            logger.info("[profile] ITEMS_MISSING user=%s count=%s", user_id, missing)
        self.adapter.log_truncations(f"profile:{user_id}")

        source_affinity, negative_sources = sources.split()
        category_affinity, negative_categories = categories.split()

        # --- 3. Interest vector (or cold start from top sources) ---
        cold_start = False
        if vectors:
            interest_vector = weighted_mean(vectors, weights)
        elif has_positive:
            try:
                interest_vector = self._cold_start_vector(source_affinity)
            except Exception as e:
                logger.warning("[profile] COLD_START_FETCH_FAILED user=%s err=%s", user_id, e)
                return None
            cold_start = interest_vector is not None
        else:
            interest_vector = None
        if interest_vector is None:
            logger.info("[profile] PROFILE_NONE user=%s signals=%s", user_id, len(signals))
            return None

        return UserProfile(
            user_id=user_id,
            interest_vector=[float(x) for x in interest_vector],
            source_affinity=source_affinity,
            category_affinity=category_affinity,
            negative_signals=NegativeSignals(
                sources=negative_sources, categories=negative_categories
            ),
            last_computed_at=now,
            recent_activity_count=self._recent_activity_count(user_id, signals, now),
            interactions_used=used,
            cold_start=cold_start,
        )
