"""
Item Corpus implementations.

Supplies items to the profile builder, candidate pool, and index rebuild.
Implementations: in-memory (tests, local), JSON file (DATA_SOURCE=json).
"""

import json
import threading
from collections import defaultdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Sequence, Union

from feedrank.models.item import Item, ensure_items
from feedrank.utils.scores import utc_now


class InMemoryItemCorpus:
    """Item corpus held in a dict. Writers replace items wholesale (counters included)."""

    def __init__(
        self,
        items: Iterable[Union[Dict, Item]] = (),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._lock = threading.Lock()
        self._items: Dict[str, Item] = {}
        self.clock = clock
        self.upsert(list(items))

    def upsert(self, items: List[Union[Dict, Item]]) -> None:
        typed = ensure_items(items)
        with self._lock:
            for item in typed:
                self._items[item.id] = item

    def __len__(self) -> int:
        return len(self._items)

    def _newest_first(self, items: Iterable[Item]) -> List[Item]:
        return sorted(items, key=lambda it: (-it.published_at.timestamp(), it.id))

    def find_by_ids(self, ids: Sequence[str]) -> List[Item]:
        items = self._items
        return [items[i] for i in dict.fromkeys(ids) if i in items]

    def iter_with_embeddings(self, item_type: str) -> Iterator[Item]:
        for item in list(self._items.values()):
            if item.item_type != item_type:
                continue
            if item.embedding is None and item.reduced_embedding is None:
                continue
            yield item

    def find_recent(self, item_type: str, since_hours: int, limit: int) -> List[Item]:
        cutoff = self.clock() - timedelta(hours=since_hours)
        recent = [
            it for it in self._items.values()
            if it.item_type == item_type and it.published_at >= cutoff
        ]
        return self._newest_first(recent)[:limit]

    def find_by_sources(self, sources: Sequence[str], limit: int) -> List[Item]:
        wanted = set(sources)
        by_source: Dict[str, List[Item]] = defaultdict(list)
        for it in self._items.values():
            if it.source in wanted:
                by_source[it.source].append(it)
        out: List[Item] = []
        for src in sources:
            out.extend(self._newest_first(by_source.get(src, []))[:limit])
        return out


class JsonItemCorpus(InMemoryItemCorpus):
    """
    Item corpus loaded from a JSON array of item documents.
    Used when DATA_SOURCE=json; path comes from ITEMS_JSON_PATH.
    """

    def __init__(self, items_path: Union[Path, str], clock: Callable[[], datetime] = utc_now):
        self._items_path = Path(items_path)
        if not self._items_path.exists():
            raise FileNotFoundError(f"Items JSON not found: {self._items_path}")
        with open(self._items_path) as f:
            docs = json.load(f)
        super().__init__(docs, clock=clock)
