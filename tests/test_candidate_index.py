"""
Candidate Index Tests

Cosine-distance retrieval, rebuild snapshots, skip accounting, and the
unavailable/incompatible error paths, for the in-memory and Qdrant indexes.

Run:
----
    pytest tests/test_candidate_index.py -v
"""

import pytest
from qdrant_client import QdrantClient

from feed_server.services import QdrantCandidateIndex
from feedrank.errors import IncompatibleEmbeddingError, IndexUnavailableError
from feedrank.stages.candidate_index import CandidateIndexRegistry, InMemoryCandidateIndex
from feedrank.utils import cosine_similarity, similarity_from_distance


@pytest.fixture
def items(make_item):
    return [
        make_item("A", vector=(1, 0, 0, 0)),
        make_item("B", vector=(0.9, 0.1, 0, 0)),
        make_item("C", vector=(0, 1, 0, 0)),
        make_item("D", vector=(-1, 0, 0, 0)),
    ]


class TestInMemoryCandidateIndex:
    def test_nearest_first_with_cosine_distance(self, items):
        index = InMemoryCandidateIndex(4)
        index.rebuild(items, "article")

        hits = index.search([1, 0, 0, 0], 3)

        assert [h[0] for h in hits] == ["A", "B", "C"]
        assert hits[0][1] == pytest.approx(0.0, abs=1e-9)
        assert hits[2][1] == pytest.approx(1.0)

    def test_opposite_vector_has_distance_two(self, items):
        index = InMemoryCandidateIndex(4)
        index.rebuild(items, "article")
        hits = dict(index.search([1, 0, 0, 0], 10))
        assert hits["D"] == pytest.approx(2.0)

    def test_unbuilt_or_empty_index_is_unavailable(self):
        index = InMemoryCandidateIndex(4)
        with pytest.raises(IndexUnavailableError):
            index.search([1, 0, 0, 0], 5)
        index.rebuild([], "article")
        with pytest.raises(IndexUnavailableError):
            index.search([1, 0, 0, 0], 5)

    def test_query_dimension_mismatch(self, items):
        index = InMemoryCandidateIndex(4)
        index.rebuild(items, "article")
        with pytest.raises(IncompatibleEmbeddingError):
            index.search([1, 0, 0], 5)

    def test_rebuild_skips_unusable_items(self, make_item):
        index = InMemoryCandidateIndex(4)
        stats = index.rebuild(
            [
                make_item("A"),
                make_item("small", vector=(1, 0)),
                make_item("none", vector=None),
                make_item("zero", vector=(0, 0, 0, 0)),
                make_item("video", item_type="video"),
            ],
            "article",
        )
        assert stats.indexed == 1
        assert stats.skipped == 3
        assert index.size() == 1

    def test_rebuild_replaces_snapshot(self, items, make_item):
        index = InMemoryCandidateIndex(4)
        index.rebuild(items, "article")
        index.rebuild([make_item("Z", vector=(0, 0, 1, 0))], "article")
        assert [h[0] for h in index.search([1, 0, 0, 0], 10)] == ["Z"]


class TestCandidateIndexRegistry:
    def test_missing_item_type_is_unavailable(self, registry):
        with pytest.raises(IndexUnavailableError):
            registry.get("video")

    def test_rebuild_from_corpus(self, registry, corpus, items, make_item):
        corpus.upsert(items + [make_item("V", item_type="video")])

        stats = registry.rebuild("article", corpus)

        assert stats.indexed == 4
        assert registry.stats() == {"article": 4}
        assert registry.get("article").search([0, 1, 0, 0], 1)[0][0] == "C"


class TestQdrantCandidateIndex:
    @pytest.fixture
    def index(self):
        return QdrantCandidateIndex(4, client=QdrantClient(":memory:"))

    def test_search_matches_in_memory_ordering(self, index, items):
        index.rebuild(items, "article")

        hits = index.search([1, 0, 0, 0], 3)

        assert [h[0] for h in hits] == ["A", "B", "C"]
        assert hits[0][1] == pytest.approx(0.0, abs=1e-5)

    def test_rebuild_drops_previous_collection(self, index, items):
        index.rebuild(items, "article")
        first = index.collection_name
        index.rebuild(items[:2], "article")

        names = {c.name for c in index.client.get_collections().collections}

        assert first not in names
        assert index.collection_name in names
        assert index.size() == 2

    def test_unbuilt_index_is_unavailable(self, index):
        with pytest.raises(IndexUnavailableError):
            index.search([1, 0, 0, 0], 3)


class TestDistanceToSimilarity:
    @pytest.mark.parametrize(
        "vector", [(1, 0, 0, 0), (0.9, 0.1, 0, 0), (0, 1, 0, 0), (-1, 0, 0, 0), (0.6, 0.8, 0, 0)]
    )
    def test_index_distance_inverts_to_clamped_cosine(self, make_item, vector):
        index = InMemoryCandidateIndex(4)
        index.rebuild([make_item("X", vector=vector)], "article")
        query = [0.8, 0.6, 0.0, 0.0]

        (_, distance), = index.search(query, 1)

        # Opposite directions count as unrelated
        expected = min(1.0, max(0.0, cosine_similarity(query, vector)))
        assert similarity_from_distance(distance) == pytest.approx(expected)

    def test_mismatched_vectors_score_zero(self):
        assert cosine_similarity([1, 0], [1, 0, 0]) == 0.0
        assert cosine_similarity([0, 0], [1, 0]) == 0.0
