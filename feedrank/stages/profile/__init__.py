"""User profile construction and caching."""

from .builder import ProfileBuilder
from .cache import ProfileCache, profile_key, ttl_for_activity

__all__ = ["ProfileBuilder", "ProfileCache", "profile_key", "ttl_for_activity"]
