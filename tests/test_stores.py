"""
Collaborator Store Tests

In-memory and JSON-seeded item corpus / interaction store, the in-process TTL
cache, and the Redis cache adapter (against a stand-in client).

Run:
----
    pytest tests/test_stores.py -v
"""

import json
from datetime import timedelta

import pytest

from feed_server.services import (
    InMemoryKeyValueCache,
    JsonInteractionStore,
    JsonItemCorpus,
    RedisKeyValueCache,
)
from feedrank.models import InteractionType


class _FakeRedis:
    def __init__(self):
        self.calls = []
        self.data = {}

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value, ex=None):
        self.calls.append((key, ex))
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


class TestItemCorpus:
    def test_find_recent_newest_first_within_window(self, corpus, make_item):
        corpus.upsert([
            make_item("old", age_days=10),
            make_item("b", age_days=1),
            make_item("a", age_days=1),
            make_item("new", age_days=0.1),
            make_item("vid", age_days=0.1, item_type="video"),
        ])
        assert [it.id for it in corpus.find_recent("article", 72, 10)] == ["new", "a", "b"]
        assert [it.id for it in corpus.find_recent("article", 72, 1)] == ["new"]

    def test_find_by_sources_limits_per_source(self, corpus, make_item):
        corpus.upsert([make_item(f"s1_{i}", source="S1", age_days=i) for i in range(5)])
        corpus.upsert([make_item("s2_0", source="S2")])
        ids = [it.id for it in corpus.find_by_sources(["S1", "S2"], 2)]
        assert ids == ["s1_0", "s1_1", "s2_0"]

    def test_find_by_ids_skips_missing(self, corpus, make_item):
        corpus.upsert([make_item("A")])
        assert [it.id for it in corpus.find_by_ids(["ghost", "A", "A"])] == ["A"]

    def test_json_corpus_loads_documents(self, tmp_path, clock, now):
        path = tmp_path / "items.json"
        path.write_text(json.dumps([
            {
                "id": "doc1",
                "embedding": [1, 0, 0, 0],
                "source": "S1",
                "categories": ["news", "news", "tech"],
                "published_at": (now - timedelta(hours=2)).isoformat(),
            }
        ]))

        corpus = JsonItemCorpus(path, clock=clock)

        (item,) = corpus.find_recent("article", 72, 10)
        assert item.embedding.dimension == 4
        assert item.categories == ["news", "tech"]

    def test_json_corpus_requires_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            JsonItemCorpus(tmp_path / "missing.json")


class TestInteractionStore:
    def test_find_recent_filters_types_and_age(self, interactions, make_interaction):
        interactions.append(make_interaction("u1", "a", "like", age_days=2))
        interactions.append(make_interaction("u1", "b", "like", age_days=0))
        interactions.append(make_interaction("u1", "c", "save", age_days=0))
        interactions.append(make_interaction("u1", "d", "like", age_days=40))

        found = interactions.find_recent("u1", [InteractionType.LIKE], 10, 30)

        assert [i.item_id for i in found] == ["b", "a"]
        assert interactions.find_recent("nobody", [InteractionType.LIKE], 10, 30) == []

    def test_delete_user(self, interactions, make_interaction):
        interactions.append(make_interaction("u1", "a", "like"))
        interactions.append(make_interaction("u2", "a", "like"))
        assert interactions.delete_user("u1") == 1
        assert interactions.count("u1") == 0
        assert interactions.count("u2") == 1

    def test_json_store_starts_empty_without_file(self, tmp_path):
        store = JsonInteractionStore(tmp_path / "none.json")
        assert store.count("u1") == 0


class TestKeyValueCaches:
    def test_in_memory_entries_expire(self):
        now = [0.0]
        kv = InMemoryKeyValueCache(clock=lambda: now[0])
        kv.set("k", "v", 10)
        assert kv.get("k") == "v"
        now[0] = 10.0
        assert kv.get("k") is None

    def test_redis_adapter_sets_expiry(self):
        fake = _FakeRedis()
        cache = RedisKeyValueCache(client=fake)

        cache.set("profile:u1", "{}", 3600)
        cache.set("profile:u2", "{}", 0)

        assert fake.calls == [("profile:u1", 3600), ("profile:u2", 1)]
        assert cache.get("profile:u1") == "{}"
        cache.delete("profile:u1")
        assert cache.get("profile:u1") is None
