"""
Embedding adapter — derives the index-dimension vector for an item.

All vectors that meet in one comparison (interest vector, index entries, query
vector) must share the index dimension. This module is the single place that
decides how an item's stored embeddings map onto that dimension:

    1. embedding of exactly the index dimension → used as is
    2. reduced_embedding of the index dimension → used as is
    3. larger embedding + DimensionReducer       → reducer.reduce(values)
    4. larger embedding, no reducer              → truncated (lossy fallback)
    5. smaller embedding / none                  → IncompatibleEmbeddingError

Changes to this mapping require rebuilding every Candidate Index.
"""

import logging
from typing import List, Optional

from ..errors import IncompatibleEmbeddingError
from ..interfaces import DimensionReducer
from ..models.item import Item

logger = logging.getLogger(__name__)


class EmbeddingAdapter:
    """Maps item embeddings onto a fixed target dimension."""

    def __init__(self, dimension: int, reducer: Optional[DimensionReducer] = None):
        if reducer is not None and reducer.output_dimension != dimension:
            raise ValueError(
                f"Reducer outputs {reducer.output_dimension} dims, index expects {dimension}"
            )
        self.dimension = dimension
        self.reducer = reducer
        # Number of truncations since the last reset; callers log once per batch
        self.truncations = 0

    def vector_for(self, item: Item) -> List[float]:
        """Return the item's vector at the target dimension or raise IncompatibleEmbeddingError."""
        emb = item.embedding
        if emb is not None and emb.dimension == self.dimension:
            return list(emb.values)
        reduced = item.reduced_embedding
        if reduced is not None and reduced.dimension == self.dimension:
            return list(reduced.values)
        if emb is not None and emb.dimension > self.dimension:
            if self.reducer is not None:
                return list(self.reducer.reduce(list(emb.values)))
            self.truncations += 1
            return list(emb.values[: self.dimension])
        have = emb.dimension if emb is not None else None
        raise IncompatibleEmbeddingError(
            f"item {item.id} has no embedding usable at dimension {self.dimension} (has {have})"
        )

    def try_vector_for(self, item: Item) -> Optional[List[float]]:
        """vector_for, returning None instead of raising."""
        try:
            return self.vector_for(item)
        except IncompatibleEmbeddingError as e:
            logger.debug("[embedding] EMBEDDING_INCOMPATIBLE %s", e)
            return None

    def log_truncations(self, context: str) -> None:
        """Log (once) how many vectors were truncated since the last call, then reset."""
        if self.truncations:
            logger.warning(
                "[embedding] EMBEDDING_TRUNCATED context=%s count=%s target_dim=%s",
                context, self.truncations, self.dimension,
            )
        self.truncations = 0
