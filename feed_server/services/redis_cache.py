"""
Redis key/value cache for profiles.

Errors propagate to the caller; the profile cache treats every failure as a miss.
"""

import logging
import os
from typing import Optional

import redis

logger = logging.getLogger(__name__)


class RedisKeyValueCache:
    """KeyValueCache backed by a Redis server (SET with EX)."""

    def __init__(self, redis_url: Optional[str] = None, client: Optional[redis.Redis] = None):
        if client is not None:
            self.client = client
            return
        redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379")
        try:
            self.client = redis.from_url(redis_url, decode_responses=True)
            self.client.ping()
            logger.info("[redis] REDIS_CONNECTED url=%s", redis_url)
        except Exception as e:
            logger.error("[redis] REDIS_CONNECT_FAILED url=%s err=%s", redis_url, e)
            raise

    def get(self, key: str) -> Optional[str]:
        return self.client.get(key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self.client.set(key, value, ex=max(int(ttl_seconds), 1))

    def delete(self, key: str) -> None:
        self.client.delete(key)
