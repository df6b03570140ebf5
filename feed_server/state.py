"""Application state: collaborators, index registry, and the FeedService."""

import logging
import threading
from typing import Any, Callable, Dict, Optional

from feedrank import CandidateIndexRegistry, FeedService, InMemoryCandidateIndex
from feedrank.interfaces import InteractionStore, ItemCorpus, KeyValueCache
from feedrank.models.config import RankingConfig

from .config import ServerConfig, get_config
from .services import (
    InMemoryInteractionStore,
    InMemoryItemCorpus,
    InMemoryKeyValueCache,
    JsonInteractionStore,
    JsonItemCorpus,
    QdrantCandidateIndex,
    RedisKeyValueCache,
)
from .utils import load_ranking_config

logger = logging.getLogger(__name__)


class AppState:
    """Global application state."""

    def __init__(
        self,
        config: ServerConfig,
        ranking_config: Optional[RankingConfig] = None,
        corpus: Optional[ItemCorpus] = None,
        interactions: Optional[InteractionStore] = None,
        cache: Optional[KeyValueCache] = None,
        index_factory: Optional[Callable[[int], Any]] = None,
    ):
        self.config = config
        self.ranking_config = ranking_config or load_ranking_config(
            config.ranking_config_path, config.index_dimension
        )

        self.corpus = corpus if corpus is not None else self._create_corpus(config)
        print(f"[startup] Item corpus: {type(self.corpus).__name__}")
        self.interactions = (
            interactions if interactions is not None else self._create_interaction_store(config)
        )
        print(f"[startup] Interaction store: {type(self.interactions).__name__}")
        self.cache = cache if cache is not None else self._create_cache(config)
        print(f"[startup] Profile cache backend: {type(self.cache).__name__}")

        factory = index_factory or self._index_factory(config)
        self.indexes = CandidateIndexRegistry(self.ranking_config.index_dimension, factory)
        if index_factory is not None:
            self.index_backend = "custom"
        else:
            self.index_backend = "qdrant" if config.qdrant_url else "memory"
        print(f"[startup] Candidate index: {self.index_backend}")

        self.service = FeedService(
            interactions=self.interactions,
            corpus=self.corpus,
            cache=self.cache,
            indexes=self.indexes,
            cursor_secret=config.resolved_cursor_secret(),
            config=self.ranking_config,
        )
        self._index_thread: Optional[threading.Thread] = None

    def _create_corpus(self, config: ServerConfig) -> ItemCorpus:
        """Create item corpus (JSON file when DATA_SOURCE=json, else empty in-memory)."""
        if config.data_source == "json" and config.items_json_path:
            return JsonItemCorpus(config.items_json_path)
        return InMemoryItemCorpus()

    def _create_interaction_store(self, config: ServerConfig) -> InteractionStore:
        if config.data_source == "json" and config.interactions_json_path:
            return JsonInteractionStore(config.interactions_json_path)
        return InMemoryInteractionStore()

    def _create_cache(self, config: ServerConfig) -> KeyValueCache:
        """Redis when REDIS_URL is set and reachable, else in-process."""
        if config.redis_url:
            try:
                return RedisKeyValueCache(config.redis_url)
            except Exception as e:
                print(f"[startup] Redis cache init failed: {e}, using in-memory cache")
        return InMemoryKeyValueCache()

    def _index_factory(self, config: ServerConfig) -> Callable[[int], Any]:
        if config.qdrant_url:
            url = config.qdrant_url
            return lambda dim: QdrantCandidateIndex(dim, qdrant_url=url)
        return lambda dim: InMemoryCandidateIndex(dim)

    def rebuild_indexes(self) -> Dict[str, int]:
        """Rebuild every configured item type's index (blocking). Failures are logged per type."""
        built: Dict[str, int] = {}
        for item_type in self.config.item_types:
            try:
                stats = self.service.rebuild_index(item_type)
                built[item_type] = stats.indexed
                print(f"[startup] Index {item_type}: {stats.indexed} items ({stats.skipped} skipped)")
            except Exception as e:
                logger.warning("[startup] INDEX_BUILD_FAILED item_type=%s err=%s", item_type, e)
        return built

    def start_index_build(self) -> threading.Thread:
        """Build indexes in a background thread; requests fall back to trending until done."""
        thread = threading.Thread(target=self.rebuild_indexes, name="index-build", daemon=True)
        thread.start()
        self._index_thread = thread
        return thread


_state: Optional[AppState] = None


def get_state() -> AppState:
    global _state
    if _state is None:
        config = get_config()
        _state = AppState(config)
    return _state


def set_state(state: Optional[AppState]) -> None:
    """Install (or clear) the global state; used by tests and embedding apps."""
    global _state
    _state = state
