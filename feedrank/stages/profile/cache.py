"""
Profile Cache — last computed profile per user with an activity-tiered TTL.

Smart TTL (from recent_activity_count):
    >= activity_high_threshold   → ttl_short_seconds  (6h)
    >= activity_medium_threshold → ttl_medium_seconds (24h)
    otherwise                    → ttl_long_seconds   (7d)

The backing KeyValueCache is unreliable: every failure is logged and read as a miss.
Writes are best-effort. Concurrent rebuilds of one user are coalesced with a
sharded set of in-process locks.

Every invalidate bumps a per-user generation. A rebuild that started before the
bump does not write its (already stale) profile back.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError

from ...interfaces import KeyValueCache
from ...models.config import DEFAULT_CONFIG, RankingConfig
from ...models.profile import UserProfile
from ...utils.rng import string_hash

logger = logging.getLogger(__name__)

KEY_PREFIX = "profile:"
LOCK_SHARDS = 64


def profile_key(user_id: str) -> str:
    return f"{KEY_PREFIX}{user_id}"


def ttl_for_activity(recent_activity_count: int, config: RankingConfig = DEFAULT_CONFIG) -> int:
    """TTL in seconds for a profile with the given recent activity."""
    if recent_activity_count >= config.activity_high_threshold:
        return config.ttl_short_seconds
    if recent_activity_count >= config.activity_medium_threshold:
        return config.ttl_medium_seconds
    return config.ttl_long_seconds


class ProfileCache:
    """Caches UserProfile JSON under profile:{user_id}."""

    def __init__(
        self,
        cache: KeyValueCache,
        config: RankingConfig = DEFAULT_CONFIG,
        shards: int = LOCK_SHARDS,
    ):
        self.cache = cache
        self.config = config
        self._locks: List[threading.Lock] = [threading.Lock() for _ in range(shards)]
        self._generations: Dict[str, int] = {}
        self._generation_lock = threading.Lock()

    def _lock_for(self, user_id: str) -> threading.Lock:
        return self._locks[string_hash(user_id) % len(self._locks)]

    def generation(self, user_id: str) -> int:
        with self._generation_lock:
            return self._generations.get(user_id, 0)

    def get(self, user_id: str) -> Optional[UserProfile]:
        try:
            raw = self.cache.get(profile_key(user_id))
        except Exception as e:
            logger.warning("[profile_cache] CACHE_GET_FAILED user=%s err=%s", user_id, e)
            return None
        if raw is None:
            return None
        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("[profile_cache] CACHE_ENTRY_INVALID user=%s err=%s", user_id, e)
            self.invalidate(user_id)
            return None

    def put(self, profile: UserProfile) -> bool:
        """Best-effort write; returns False when the cache refused it."""
        ttl = ttl_for_activity(profile.recent_activity_count, self.config)
        try:
            self.cache.set(profile_key(profile.user_id), profile.model_dump_json(), ttl)
            return True
        except Exception as e:
            logger.warning("[profile_cache] CACHE_SET_FAILED user=%s err=%s", profile.user_id, e)
            return False

    def invalidate(self, user_id: str) -> None:
        with self._generation_lock:
            self._generations[user_id] = self._generations.get(user_id, 0) + 1
        try:
            self.cache.delete(profile_key(user_id))
        except Exception as e:
            logger.warning("[profile_cache] CACHE_DELETE_FAILED user=%s err=%s", user_id, e)

    def get_or_build(
        self,
        user_id: str,
        build: Callable[[str], Optional[UserProfile]],
    ) -> Optional[UserProfile]:
        """
        Cached profile, or build → put → return.

        The per-user lock is re-checked after acquisition so a caller that waited
        on another caller's rebuild reuses its result instead of rebuilding.
        If the user was invalidated while build ran, the result is returned but
        not cached.
        """
        cached = self.get(user_id)
        if cached is not None:
            return cached
        with self._lock_for(user_id):
            cached = self.get(user_id)
            if cached is not None:
                return cached
            started = self.generation(user_id)
            profile = build(user_id)
            if profile is None:
                return None
            # Held across the write so an invalidate cannot slip in between check and put
            with self._generation_lock:
                if self._generations.get(user_id, 0) != started:
                    logger.info("[profile_cache] CACHE_PUT_SKIPPED_STALE user=%s", user_id)
                    return profile
                self.put(profile)
            return profile
