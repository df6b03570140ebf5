"""Pipeline stages: profile, candidate index and pool (Stage A), ranking (Stage B), composer, cursor."""

from .candidate_index import CandidateIndexRegistry, InMemoryCandidateIndex, IndexBuildStats
from .candidate_pool import filter_eligible, recent_pool, search_candidates, window_ladder
from .composer import ComposedPage, FeedComposer
from .cursor_codec import CursorCodec
from .profile import ProfileBuilder, ProfileCache
from .ranking import rank_non_personalized, rank_personalized

__all__ = [
    "CandidateIndexRegistry",
    "ComposedPage",
    "CursorCodec",
    "FeedComposer",
    "InMemoryCandidateIndex",
    "IndexBuildStats",
    "ProfileBuilder",
    "ProfileCache",
    "filter_eligible",
    "rank_non_personalized",
    "rank_personalized",
    "recent_pool",
    "search_candidates",
    "window_ladder",
]
