"""In-process key/value cache with per-key TTL (local runs and tests; Redis in production)."""

import threading
import time
from typing import Callable, Dict, Optional, Tuple


class InMemoryKeyValueCache:
    """Dict-backed cache; expired keys are dropped lazily on read."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[str, float]] = {}
        self.clock = clock

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self.clock() >= expires_at:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._data[key] = (value, self.clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left for key, or None if absent."""
        with self._lock:
            entry = self._data.get(key)
        if entry is None:
            return None
        return max(0.0, entry[1] - self.clock())
