"""
Feed Composer — turns a ranked list into one page.

Steps:
    1. drop excluded ids
    2. main slice: top ceil(limit * main_ratio)
    3. diversity: lower-ranked items with similarity > floor, seeded shuffle,
       inserted at seeded positions (seed + 1)
    4. trending: highest-engagement items from the trending pool, inserted at
       seeded positions (seed + 2)
    5. backfill from the remaining ranked items while the page is short; the
       trending pool is only drawn on when backfill_trending is set (the caller
       sets it once no wider window is left)
    6. truncate to limit
    7. append served ids to the exclusion list (FIFO cap)

The seed is derived from (user, page, day), so the same request on the same day
yields the same page.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from ..models.config import DEFAULT_CONFIG, RankingConfig
from ..models.scoring import Provenance, ScoredCandidate
from ..utils.rng import seeded_insert, seeded_shuffle
from .ranking.core import engagement_key


@dataclass
class ComposedPage:
    items: List[ScoredCandidate] = field(default_factory=list)
    excluded_ids: List[str] = field(default_factory=list)
    exhausted: bool = True

    @property
    def last_served_id(self) -> Optional[str]:
        return self.items[-1].item_id if self.items else None


def cap_exclusions(excluded_ids: Sequence[str], served: Sequence[str], cap: int) -> List[str]:
    """Append served ids (deduplicated) and evict the oldest beyond cap."""
    merged = list(dict.fromkeys(list(excluded_ids) + list(served)))
    if cap <= 0:
        return []
    return merged[-cap:]


class FeedComposer:
    """Composes pages from ranked candidates; stateless apart from config."""

    def __init__(self, config: RankingConfig = DEFAULT_CONFIG):
        self.config = config

    def _diversity_picks(
        self,
        rest: List[ScoredCandidate],
        count: int,
        seed: int,
    ) -> List[ScoredCandidate]:
        if count <= 0:
            return []
        floor = self.config.diversity_similarity_floor
        eligible = [c for c in rest if c.similarity > floor][: count * 2]
        return [c.tagged(Provenance.DIVERSITY) for c in seeded_shuffle(eligible, seed)[:count]]

    def _trending_picks(
        self,
        pool: Sequence[ScoredCandidate],
        count: int,
        taken: Set[str],
    ) -> List[ScoredCandidate]:
        if count <= 0:
            return []
        picks: List[ScoredCandidate] = []
        for c in sorted(pool, key=engagement_key):
            if c.item_id in taken:
                continue
            picks.append(c.tagged(Provenance.TRENDING))
            taken.add(c.item_id)
            if len(picks) >= count:
                break
        return picks

    def compose(
        self,
        ranked: Sequence[ScoredCandidate],
        excluded_ids: Sequence[str],
        limit: int,
        seed: int,
        trending_pool: Sequence[ScoredCandidate] = (),
        personalized: bool = True,
        backfill_trending: bool = True,
    ) -> ComposedPage:
        """
        Build one page of at most limit items.

        personalized=False (trending strategy) serves the ranked list as is:
        the main slice covers the whole page and nothing is injected.
        backfill_trending=False leaves a short page short so the caller can
        widen the candidate window first.
        """
        cfg = self.config
        if limit <= 0:
            return ComposedPage(excluded_ids=list(excluded_ids), exhausted=True)

        # --- 1. Exclusions ---
        excluded = set(excluded_ids)
        available = [c for c in ranked if c.item_id not in excluded]

        # --- 2. Main slice ---
        main_ratio = cfg.main_ratio if personalized else 1.0
        main_count = math.ceil(limit * main_ratio)
        page = list(available[:main_count])
        rest = available[main_count:]

        if personalized:
            # --- 3. Diversity injection ---
            diversity_count = math.ceil(limit * cfg.diversity_ratio)
            diversity = self._diversity_picks(rest, diversity_count, seed)
            page = seeded_insert(page, diversity, seed + 1)

            # --- 4. Trending injection ---
            taken = excluded | {c.item_id for c in page}
            trending_count = math.ceil(limit * cfg.trending_ratio)
            trending = self._trending_picks(trending_pool, trending_count, taken)
            page = seeded_insert(page, trending, seed + 2)

        # --- 5. Backfill: remaining ranked first, then (optionally) the trending pool ---
        if len(page) < limit:
            chosen = excluded | {c.item_id for c in page}
            fallback: List[ScoredCandidate] = []
            if backfill_trending:
                fallback = [c.tagged(Provenance.TRENDING) for c in trending_pool]
            for c in list(rest) + fallback:
                if len(page) >= limit:
                    break
                if c.item_id not in chosen:
                    page.append(c)
                    chosen.add(c.item_id)

        # --- 6. Truncate ---
        page = page[:limit]

        # --- 7. Exclusion list ---
        served = [c.item_id for c in page]
        return ComposedPage(
            items=page,
            excluded_ids=cap_exclusions(excluded_ids, served, cfg.exclusion_cap),
            exhausted=len(page) < limit,
        )
