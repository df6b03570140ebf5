"""
Qdrant Candidate Index

CandidateIndex backed by a Qdrant cosine collection. Each rebuild writes a fresh
versioned collection, then swaps the active collection name in one assignment
and drops the previous one, so searches never see a half-written index.

Collection naming: {prefix}_{item_type}_v{build_ms}_{build_seq}
Example: feedrank_article_v1760659200000_1

Qdrant reports cosine *similarity* as the hit score; search() converts it to
cosine distance (1 - score) to match the in-memory index.
"""

import logging
import os
import time
import uuid
from typing import Iterable, List, Optional, Tuple

from qdrant_client import QdrantClient
from qdrant_client.http import models

from feedrank.embedding import EmbeddingAdapter
from feedrank.errors import IncompatibleEmbeddingError, IndexUnavailableError
from feedrank.models.item import Item
from feedrank.stages.candidate_index import IndexBuildStats
from feedrank.utils.scores import utc_now

logger = logging.getLogger(__name__)

UPSERT_BATCH_SIZE = 100


def point_id(item_id: str) -> str:
    """Qdrant point ids must be uint or UUID; derive a stable UUID from the item id."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"feedrank:{item_id}"))


class QdrantCandidateIndex:
    """Per-item-type index in Qdrant with versioned-collection rebuilds."""

    def __init__(
        self,
        dimension: int,
        client: Optional[QdrantClient] = None,
        qdrant_url: Optional[str] = None,
        prefix: str = "feedrank",
        adapter: Optional[EmbeddingAdapter] = None,
        timeout: float = 30.0,
    ):
        self.dimension = dimension
        self.prefix = prefix
        self.adapter = adapter or EmbeddingAdapter(dimension)
        if client is None:
            url = qdrant_url or os.environ.get("QDRANT_URL", "http://localhost:6333")
            client = QdrantClient(url=url, timeout=timeout)
        self.client = client
        self._collection: Optional[str] = None
        self._size = 0
        self._builds = 0

    @property
    def collection_name(self) -> Optional[str]:
        return self._collection

    def size(self) -> int:
        return self._size

    def _new_collection_name(self, item_type: str) -> str:
        safe_type = item_type.replace("-", "_").replace(".", "_").replace("/", "_")
        self._builds += 1
        return f"{self.prefix}_{safe_type}_v{int(time.time() * 1000)}_{self._builds}"

    def _points(self, items: Iterable[Item], item_type: str) -> Tuple[List[models.PointStruct], int]:
        points: List[models.PointStruct] = []
        skipped = 0
        for item in items:
            if item.item_type != item_type:
                continue
            vec = self.adapter.try_vector_for(item)
            if vec is None or not any(vec):
                skipped += 1
                continue
            points.append(
                models.PointStruct(
                    id=point_id(item.id),
                    vector=[float(x) for x in vec],
                    payload={"item_id": item.id, "item_type": item.item_type},
                )
            )
        return points, skipped

    def rebuild(self, items: Iterable[Item], item_type: str) -> IndexBuildStats:
        points, skipped = self._points(items, item_type)
        self.adapter.log_truncations(f"qdrant:{item_type}")
        name = self._new_collection_name(item_type)
        self.client.create_collection(
            collection_name=name,
            vectors_config=models.VectorParams(size=self.dimension, distance=models.Distance.COSINE),
        )
        for i in range(0, len(points), UPSERT_BATCH_SIZE):
            self.client.upsert(collection_name=name, points=points[i:i + UPSERT_BATCH_SIZE])

        previous = self._collection
        # Single assignment switches readers to the new collection
        self._collection, self._size = name, len(points)
        if previous and previous != name:
            try:
                self.client.delete_collection(previous)
            except Exception as e:
                logger.warning("[qdrant] DROP_OLD_COLLECTION_FAILED name=%s err=%s", previous, e)
        logger.info(
            "[qdrant] INDEX_REBUILT collection=%s indexed=%s skipped=%s", name, len(points), skipped
        )
        return IndexBuildStats(item_type, len(points), skipped, utc_now())

    def search(self, query_vector: List[float], k: int) -> List[Tuple[str, float]]:
        collection = self._collection
        if collection is None or self._size == 0:
            raise IndexUnavailableError("qdrant index is not built or empty")
        if len(query_vector) != self.dimension:
            raise IncompatibleEmbeddingError(
                f"query has dimension {len(query_vector)}, index expects {self.dimension}"
            )
        if k <= 0:
            return []
        try:
            response = self.client.query_points(
                collection_name=collection,
                query=[float(x) for x in query_vector],
                limit=k,
                with_payload=True,
            )
        except Exception as e:
            raise IndexUnavailableError(f"qdrant search failed: {e}") from e
        hits = [
            (point.payload.get("item_id", str(point.id)), 1.0 - float(point.score))
            for point in response.points
        ]
        hits.sort(key=lambda h: (h[1], h[0]))
        return hits
