"""Collaborator implementations: stores, caches, indexes."""

from .interaction_store import InMemoryInteractionStore, JsonInteractionStore
from .item_corpus import InMemoryItemCorpus, JsonItemCorpus
from .kv_cache import InMemoryKeyValueCache
from .qdrant_index import QdrantCandidateIndex
from .redis_cache import RedisKeyValueCache

__all__ = [
    "InMemoryInteractionStore",
    "InMemoryItemCorpus",
    "InMemoryKeyValueCache",
    "JsonInteractionStore",
    "JsonItemCorpus",
    "QdrantCandidateIndex",
    "RedisKeyValueCache",
]
