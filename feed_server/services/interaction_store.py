"""
Interaction Store implementations.

Append-only log of user actions read by the profile builder. Implementations:
in-memory (tests, local) and JSON-seeded (DATA_SOURCE=json; new interactions
stay in memory).
"""

import json
import threading
from collections import defaultdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Union

from feedrank.models.interaction import Interaction, InteractionType, ensure_interactions
from feedrank.utils.scores import utc_now


class InMemoryInteractionStore:
    """Interactions per user, kept in insertion order."""

    def __init__(
        self,
        interactions: Iterable[Union[Dict, Interaction]] = (),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._lock = threading.Lock()
        self._by_user: Dict[str, List[Interaction]] = defaultdict(list)
        self.clock = clock
        for interaction in ensure_interactions(list(interactions)):
            self.append(interaction)

    def append(self, interaction: Interaction) -> None:
        with self._lock:
            self._by_user[interaction.user_id].append(interaction)

    def find_recent(
        self,
        user_id: str,
        types: Iterable[InteractionType],
        limit: int,
        since_days: int,
    ) -> List[Interaction]:
        wanted = {InteractionType(t) for t in types}
        cutoff = self.clock() - timedelta(days=since_days)
        with self._lock:
            rows = list(self._by_user.get(user_id, ()))
        matched = [i for i in rows if i.type in wanted and i.timestamp >= cutoff]
        matched.sort(key=lambda i: i.timestamp, reverse=True)
        return matched[: max(limit, 0)]

    def delete_user(self, user_id: str) -> int:
        with self._lock:
            return len(self._by_user.pop(user_id, []))

    def count(self, user_id: str) -> int:
        return len(self._by_user.get(user_id, ()))


class JsonInteractionStore(InMemoryInteractionStore):
    """
    Interaction store seeded from a JSON array of interaction documents.
    Used when DATA_SOURCE=json; path comes from INTERACTIONS_JSON_PATH.
    """

    def __init__(self, interactions_path: Union[Path, str], clock: Callable[[], datetime] = utc_now):
        self._interactions_path = Path(interactions_path)
        docs: List[Dict] = []
        if self._interactions_path.exists():
            with open(self._interactions_path) as f:
                docs = json.load(f)
        super().__init__(docs, clock=clock)
