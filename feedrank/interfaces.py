"""
Collaborator protocols.

The ranking core reads interactions, items, and cached profiles through these
contracts. Implementations: in-memory/JSON (local, tests), Redis (cache),
Qdrant (index). Swap via server config for local vs production.
"""

from typing import Iterable, Iterator, List, Optional, Protocol, Sequence

from .models.interaction import Interaction, InteractionType
from .models.item import Item


class InteractionStore(Protocol):
    """Protocol for the append-only interaction log."""

    def find_recent(
        self,
        user_id: str,
        types: Iterable[InteractionType],
        limit: int,
        since_days: int,
    ) -> List[Interaction]:
        """
        Return up to limit interactions of the given types from the last since_days,
        newest first. Users without history yield an empty list, not an error.
        """
        ...

    def append(self, interaction: Interaction) -> None:
        """Persist one interaction."""
        ...

    def delete_user(self, user_id: str) -> int:
        """Delete all interactions for the user (privacy clear-history). Returns count removed."""
        ...


class ItemCorpus(Protocol):
    """Protocol for item lookup. Items lacking usable embeddings are still returned."""

    def find_by_ids(self, ids: Sequence[str]) -> List[Item]:
        """Return the items that exist among ids; missing ids are simply absent."""
        ...

    def iter_with_embeddings(self, item_type: str) -> Iterator[Item]:
        """Stream items of item_type that carry any embedding (index rebuild)."""
        ...

    def find_recent(self, item_type: str, since_hours: int, limit: int) -> List[Item]:
        """Items of item_type published within since_hours, newest first."""
        ...

    def find_by_sources(self, sources: Sequence[str], limit: int) -> List[Item]:
        """Up to limit newest items per source (cold-start profile)."""
        ...


class KeyValueCache(Protocol):
    """Generic key/value cache with TTL. Treated as unreliable by callers."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class DimensionReducer(Protocol):
    """Reduces a full-size embedding to the index dimension (e.g. PCA)."""

    output_dimension: int

    def reduce(self, values: List[float]) -> List[float]:
        ...
