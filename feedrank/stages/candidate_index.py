"""
Candidate Index — nearest-neighbor retrieval over item embeddings.

Metric is cosine distance (1 - cos, range [0, 2]); the scorer turns it back into a
clamped similarity. One index per item type, all at the configured dimension.

Rebuilds construct a fresh immutable snapshot and publish it with a single
attribute assignment, so concurrent searches see either the old or the new
snapshot, never a mix. Items added after a rebuild are invisible until the next.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

import numpy as np

from ..embedding import EmbeddingAdapter
from ..errors import IncompatibleEmbeddingError, IndexUnavailableError
from ..interfaces import ItemCorpus
from ..models.item import Item
from ..utils.scores import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexBuildStats:
    """Outcome of one rebuild."""

    item_type: str
    indexed: int
    skipped: int
    built_at: datetime


class CandidateIndex(Protocol):
    """Protocol for a per-item-type ANN index."""

    dimension: int

    def search(self, query_vector: List[float], k: int) -> List[Tuple[str, float]]:
        """Up to k (item_id, cosine distance) pairs, nearest first."""
        ...

    def rebuild(self, items: Iterable[Item], item_type: str) -> IndexBuildStats:
        """Replace the indexed set with items of item_type carrying a usable embedding."""
        ...

    def size(self) -> int:
        ...


@dataclass(frozen=True)
class _Snapshot:
    ids: Tuple[str, ...]
    matrix: np.ndarray  # (n, dimension), rows L2-normalized


def _check_query(query_vector: List[float], dimension: int) -> np.ndarray:
    q = np.asarray(query_vector, dtype=float)
    if q.ndim != 1 or q.shape[0] != dimension:
        raise IncompatibleEmbeddingError(
            f"query has dimension {q.shape[0] if q.ndim == 1 else q.shape}, index expects {dimension}"
        )
    return q


class InMemoryCandidateIndex:
    """Exact cosine search over a normalized numpy matrix."""

    def __init__(self, dimension: int, adapter: Optional[EmbeddingAdapter] = None):
        self.dimension = dimension
        self.adapter = adapter or EmbeddingAdapter(dimension)
        self._snapshot: Optional[_Snapshot] = None

    def size(self) -> int:
        snap = self._snapshot
        return len(snap.ids) if snap is not None else 0

    def rebuild(self, items: Iterable[Item], item_type: str) -> IndexBuildStats:
        ids: List[str] = []
        rows: List[np.ndarray] = []
        skipped = 0
        for item in items:
            if item.item_type != item_type:
                continue
            vec = self.adapter.try_vector_for(item)
            if vec is None:
                skipped += 1
                continue
            arr = np.asarray(vec, dtype=float)
            norm = np.linalg.norm(arr)
            if norm == 0:
                skipped += 1
                continue
            ids.append(item.id)
            rows.append(arr / norm)
        self.adapter.log_truncations(f"index:{item_type}")
        matrix = np.vstack(rows) if rows else np.zeros((0, self.dimension))
        # Single assignment publishes the new snapshot
        self._snapshot = _Snapshot(ids=tuple(ids), matrix=matrix)
        stats = IndexBuildStats(item_type, len(ids), skipped, utc_now())
        logger.info(
            "[index] INDEX_REBUILT item_type=%s indexed=%s skipped=%s",
            item_type, stats.indexed, stats.skipped,
        )
        return stats

    def search(self, query_vector: List[float], k: int) -> List[Tuple[str, float]]:
        snap = self._snapshot
        if snap is None or not snap.ids:
            raise IndexUnavailableError("candidate index is not built or empty")
        q = _check_query(query_vector, self.dimension)
        if k <= 0:
            return []
        norm = np.linalg.norm(q)
        if norm == 0:
            distances = np.ones(len(snap.ids))
        else:
            distances = 1.0 - snap.matrix @ (q / norm)
        k = min(k, len(snap.ids))
        if k < len(snap.ids):
            top = np.argpartition(distances, k - 1)[:k]
        else:
            top = np.arange(len(snap.ids))
        order = sorted(top, key=lambda i: (float(distances[i]), snap.ids[i]))
        return [(snap.ids[i], float(distances[i])) for i in order]


class CandidateIndexRegistry:
    """
    One CandidateIndex per item type.

    factory(dimension) builds an empty index; rebuild() streams the corpus into
    a fresh snapshot. Rebuilds are serialized (single writer).
    """

    def __init__(
        self,
        dimension: int,
        factory: Optional[Callable[[int], CandidateIndex]] = None,
    ):
        self.dimension = dimension
        self.factory = factory or (lambda dim: InMemoryCandidateIndex(dim))
        self._indexes: Dict[str, CandidateIndex] = {}
        self._write_lock = threading.Lock()

    def get(self, item_type: str) -> CandidateIndex:
        index = self._indexes.get(item_type)
        if index is None:
            raise IndexUnavailableError(f"no candidate index for item_type={item_type}")
        return index

    def rebuild(self, item_type: str, corpus: ItemCorpus) -> IndexBuildStats:
        with self._write_lock:
            index = self._indexes.get(item_type) or self.factory(self.dimension)
            stats = index.rebuild(corpus.iter_with_embeddings(item_type), item_type)
            self._indexes[item_type] = index
            return stats

    def stats(self) -> Dict[str, int]:
        return {item_type: index.size() for item_type, index in self._indexes.items()}
