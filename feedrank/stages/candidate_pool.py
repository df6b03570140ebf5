"""
Stage A: Candidate Pool

Personalized path: nearest neighbors of the interest vector from the Candidate
Index, hydrated from the corpus. Non-personalized path: newest items from the
corpus. Both are then filtered by exclusions, negative signals, and the page's
time window.

Deeper pages start at a wider time window; a pool that runs short widens to the
next window (72h → 7d → 14d → 30d) before the page is served short.

The public entry points are search_candidates, recent_pool, and filter_eligible.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from ..interfaces import ItemCorpus
from ..models.config import DEFAULT_CONFIG, RankingConfig
from ..models.item import Item
from ..models.profile import NegativeSignals
from ..utils.scores import hours_since
from ..utils.similarity import similarity_from_distance
from .candidate_index import CandidateIndex

logger = logging.getLogger(__name__)

# (item, similarity)
Candidate = Tuple[Item, float]


def window_ladder(page: int, config: RankingConfig = DEFAULT_CONFIG) -> List[int]:
    """Time windows (hours) to try for a page, narrowest first."""
    windows = config.time_windows_hours
    start = min(max(page, 1), len(windows)) - 1
    return list(windows[start:])


def _within_window(item: Item, window_hours: Optional[int], now: datetime) -> bool:
    if window_hours is None:
        return True
    return hours_since(item.published_at, now) <= window_hours


def _not_excluded(item: Item, excluded_ids: Set[str]) -> bool:
    return item.id not in excluded_ids


def filter_eligible(
    candidates: Iterable[Candidate],
    excluded_ids: Set[str],
    window_hours: Optional[int],
    now: datetime,
    negative_signals: Optional[NegativeSignals] = None,
) -> List[Candidate]:
    """
    Keep candidates inside the window, not excluded, and not blocked by a negative signal.

    window_hours=None disables the age check (last resort for index candidates).
    """
    eligible = []
    for item, similarity in candidates:
        if not _not_excluded(item, excluded_ids):
            continue
        if not _within_window(item, window_hours, now):
            continue
        if negative_signals is not None and negative_signals.blocks(item):
            continue
        eligible.append((item, similarity))
    return eligible


def search_candidates(
    index: CandidateIndex,
    corpus: ItemCorpus,
    query_vector: List[float],
    item_type: str,
    config: RankingConfig = DEFAULT_CONFIG,
    extra: int = 0,
) -> List[Candidate]:
    """
    Query the index and hydrate hits from the corpus, nearest first.

    extra widens k so exclusions do not starve the pool. Hits missing from the
    corpus are skipped and logged.
    """
    hits = index.search(query_vector, config.candidate_pool_size + max(extra, 0))
    if not hits:
        return []
    item_by_id = {it.id: it for it in corpus.find_by_ids([hid for hid, _ in hits])}
    candidates: List[Candidate] = []
    missing = 0
    for item_id, distance in hits:
        item = item_by_id.get(item_id)
        if item is None:
            missing += 1
            continue
        if item.item_type != item_type:
            continue
        candidates.append((item, similarity_from_distance(distance)))
    if missing:
        logger.info("[candidate_pool] INDEX_HITS_MISSING count=%s", missing)
    return candidates


def recent_pool(
    corpus: ItemCorpus,
    item_type: str,
    window_hours: int,
    limit: int,
    extra: int = 0,
) -> List[Candidate]:
    """
    Newest items within window_hours, paired with a neutral similarity of 0.

    extra widens the read the same way search_candidates widens k.
    """
    found = corpus.find_recent(item_type, window_hours, limit + max(extra, 0))
    return [(item, 0.0) for item in found]


def items_of(candidates: Sequence[Candidate]) -> List[Item]:
    return [item for item, _ in candidates]
