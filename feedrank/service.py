"""
FeedService — the ranking engine's single entry point.

Runs cursor decode → profile (cache, else build) → candidate retrieval →
scoring → composition → next cursor. Every collaborator call runs in a worker
thread under a timeout; a failure or timeout degrades to the next fallback path:

    no profile / wrong dimension / index unavailable → non-personalized feed
    corpus unreachable or empty at the widest window → status "unavailable"

Nothing in get_feed raises to the caller.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, List, Optional

from .embedding import EmbeddingAdapter
from .errors import CollaboratorTimeoutError, FeedRankError
from .interfaces import DimensionReducer, InteractionStore, ItemCorpus, KeyValueCache
from .models.config import DEFAULT_CONFIG, RankingConfig
from .models.cursor import CursorState
from .models.feed import FeedItem, FeedResult, FeedStrategy
from .models.interaction import WRITE_TYPES, Interaction
from .models.profile import UserProfile
from .models.scoring import ScoredCandidate
from .stages.candidate_index import CandidateIndexRegistry, IndexBuildStats
from .stages.candidate_pool import (
    Candidate,
    filter_eligible,
    items_of,
    recent_pool,
    search_candidates,
    window_ladder,
)
from .stages.composer import ComposedPage, FeedComposer
from .stages.cursor_codec import CursorCodec
from .stages.profile import ProfileBuilder, ProfileCache
from .stages.ranking import rank_non_personalized, rank_personalized
from .utils.rng import novelty_seed
from .utils.scores import utc_now

logger = logging.getLogger(__name__)


class FeedService:
    """Wires the ranking stages to their collaborators. Construct once per process."""

    def __init__(
        self,
        interactions: InteractionStore,
        corpus: ItemCorpus,
        cache: KeyValueCache,
        indexes: CandidateIndexRegistry,
        cursor_secret: str,
        config: RankingConfig = DEFAULT_CONFIG,
        reducer: Optional[DimensionReducer] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        if indexes.dimension != config.index_dimension:
            raise ValueError(
                f"index registry dimension {indexes.dimension} != config {config.index_dimension}"
            )
        self.config = config
        self.interactions = interactions
        self.corpus = corpus
        self.indexes = indexes
        self.clock = clock
        self.adapter = EmbeddingAdapter(config.index_dimension, reducer)
        self.builder = ProfileBuilder(interactions, corpus, self.adapter, config, clock)
        self.profiles = ProfileCache(cache, config)
        self.composer = FeedComposer(config)
        self.codec = CursorCodec(cursor_secret, config.cursor_max_age_seconds, clock)

    # ------------------------------------------------------------------
    # Collaborator calls
    # ------------------------------------------------------------------

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking collaborator call in a thread, bounded by the configured timeout."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(fn, *args), self.config.collaborator_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            name = getattr(fn, "__qualname__", repr(fn))
            raise CollaboratorTimeoutError(f"{name} timed out") from e

    def _best_effort(self, label: str, fn: Callable[..., Any], *args: Any) -> None:
        """At-most-once side effect; failures are logged and dropped."""
        try:
            fn(*args)
        except Exception as e:
            logger.warning("[feed] BEST_EFFORT_FAILED op=%s err=%s", label, e)

    async def _load_profile(self, user_id: str) -> Optional[UserProfile]:
        try:
            profile = await self._call(
                self.profiles.get_or_build, user_id, self.builder.build_profile
            )
        except Exception as e:
            logger.warning("[feed] PROFILE_UNAVAILABLE user=%s err=%s", user_id, e)
            return None
        if profile is not None and profile.dimension != self.config.index_dimension:
            logger.warning(
                "[feed] PROFILE_DIM_MISMATCH user=%s dim=%s index_dim=%s",
                user_id, profile.dimension, self.config.index_dimension,
            )
            self._best_effort("invalidate", self.profiles.invalidate, user_id)
            return None
        return profile

    async def _personalized_candidates(
        self,
        profile: UserProfile,
        item_type: str,
        excluded: int,
    ) -> Optional[List[Candidate]]:
        """Index candidates for the profile, or None when the index path is unavailable."""
        try:
            index = self.indexes.get(item_type)
            return await self._call(
                search_candidates,
                index,
                self.corpus,
                profile.interest_vector,
                item_type,
                self.config,
                excluded,
            )
        except FeedRankError as e:
            logger.warning("[feed] INDEX_FALLBACK user=%s err=%s", profile.user_id, e)
        except Exception as e:
            logger.warning("[feed] INDEX_SEARCH_FAILED user=%s err=%s", profile.user_id, e)
        return None

    async def _recent_items(
        self,
        item_type: str,
        window_hours: int,
        excluded: int,
    ) -> Optional[List[Candidate]]:
        try:
            return await self._call(
                recent_pool,
                self.corpus,
                item_type,
                window_hours,
                self.config.trending_pool_size,
                excluded,
            )
        except Exception as e:
            logger.warning("[feed] CORPUS_UNAVAILABLE item_type=%s err=%s", item_type, e)
            return None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def _clamp_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            limit = self.config.default_limit
        return min(limit, self.config.max_limit)

    async def get_feed(
        self,
        user_id: Optional[str],
        cursor: Optional[str] = None,
        limit: Optional[int] = None,
        strategy: FeedStrategy = FeedStrategy.PERSONALIZED,
        item_type: str = "article",
    ) -> FeedResult:
        """
        Return one page of feed for user_id (None = anonymous → trending).

        limit is clamped to max_limit; limit <= 0 yields an empty ok page. A bad,
        expired, or mismatched-strategy cursor restarts from page 1.
        """
        now = self.clock()
        strategy = FeedStrategy(strategy)
        if user_id is None:
            strategy = FeedStrategy.TRENDING
        limit = self._clamp_limit(limit)
        if limit <= 0:
            return FeedResult.empty(strategy)

        state = self.codec.decode(cursor) if cursor else None
        if state is not None and state.strategy != strategy:
            logger.info("[feed] CURSOR_STRATEGY_CHANGED user=%s", user_id)
            state = None
        page = state.page if state is not None else 1
        excluded_ids = list(state.excluded_ids) if state is not None else []
        excluded_set = set(excluded_ids)
        ladder = window_ladder(page, self.config)

        # --- 1. Profile and personalized candidates ---
        profile: Optional[UserProfile] = None
        candidates: Optional[List[Candidate]] = None
        if strategy == FeedStrategy.PERSONALIZED:
            profile = await self._load_profile(user_id)
            if profile is not None:
                candidates = await self._personalized_candidates(
                    profile, item_type, len(excluded_ids)
                )
        personalized = candidates is not None
        strategy_used = FeedStrategy.PERSONALIZED if personalized else FeedStrategy.TRENDING

        # --- 2. Recent pool at the widest window (trending injection / fallback ranking) ---
        recent = await self._recent_items(item_type, ladder[-1], len(excluded_ids))
        if not recent and not candidates:
            logger.warning(
                "[feed] FEED_UNAVAILABLE user=%s item_type=%s corpus_ok=%s",
                user_id, item_type, recent is not None,
            )
            return FeedResult.unavailable(strategy_used, page)
        recent = recent or []
        negatives = profile.negative_signals if profile is not None else None

        trending_pool: List[ScoredCandidate] = []
        if personalized:
            trending_pool = rank_non_personalized(
                items_of(filter_eligible(recent, excluded_set, ladder[-1], now, negatives)),
                page, now, self.config,
            )

        # --- 3. Rank and compose, widening the window while the page is short ---
        seed = novelty_seed(user_id, page, now)
        composed: Optional[ComposedPage] = None
        # Index hits are already bounded by k; past the widest window they are served regardless of age.
        # Trending-pool backfill waits for that last (unbounded) pass.
        windows: List[Optional[int]] = list(ladder) + ([None] if personalized else [])
        for window in windows:
            if personalized:
                eligible = filter_eligible(candidates, excluded_set, window, now, negatives)
                ranked = rank_personalized(eligible, profile, now, self.config)
            else:
                eligible = filter_eligible(recent, excluded_set, window, now, negatives)
                ranked = rank_non_personalized(items_of(eligible), page, now, self.config, profile)
            composed = self.composer.compose(
                ranked, excluded_ids, limit, seed, trending_pool,
                personalized=personalized,
                backfill_trending=window is None,
            )
            if not composed.exhausted:
                break
            logger.debug(
                "[feed] WINDOW_EXHAUSTED user=%s window_h=%s got=%s",
                user_id, window, len(composed.items),
            )

        # --- 4. Next cursor ---
        has_more = not composed.exhausted
        next_cursor = None
        if has_more:
            next_cursor = self.codec.encode(
                CursorState(
                    last_served_id=composed.last_served_id,
                    excluded_ids=composed.excluded_ids,
                    page=page + 1,
                    strategy=strategy,
                    created_at=now,
                )
            )
        logger.info(
            "[feed] FEED_SERVED user=%s strategy=%s page=%s items=%s has_more=%s",
            user_id, strategy_used.value, page, len(composed.items), has_more,
        )
        return FeedResult(
            items=[FeedItem.from_scored(c, pos) for pos, c in enumerate(composed.items)],
            next_cursor=next_cursor,
            has_more=has_more,
            strategy_used=strategy_used,
            page=page,
        )

    async def record_interaction(self, interaction: Interaction) -> bool:
        """Append an interaction; explicit signals also invalidate the cached profile."""
        try:
            await self._call(self.interactions.append, interaction)
        except Exception as e:
            logger.warning(
                "[feed] INTERACTION_APPEND_FAILED user=%s item=%s err=%s",
                interaction.user_id, interaction.item_id, e,
            )
            return False
        if interaction.type in WRITE_TYPES:
            self._best_effort("invalidate", self.profiles.invalidate, interaction.user_id)
        return True

    async def clear_history(self, user_id: str) -> int:
        """Delete the user's interactions and cached profile. Returns interactions removed."""
        removed = await self._call(self.interactions.delete_user, user_id)
        self._best_effort("invalidate", self.profiles.invalidate, user_id)
        logger.info("[feed] HISTORY_CLEARED user=%s removed=%s", user_id, removed)
        return removed

    def rebuild_index(self, item_type: str = "article") -> IndexBuildStats:
        """Rebuild the candidate index for item_type from the corpus (blocking)."""
        return self.indexes.rebuild(item_type, self.corpus)
