"""
Profile Cache Tests

Smart TTL tiers, JSON round-trip, failure-as-miss, and coalesced rebuilds.

Run:
----
    pytest tests/test_profile_cache.py -v
"""

import threading
import time

import pytest

from feedrank.models import UserProfile
from feedrank.stages.profile import ProfileCache, profile_key, ttl_for_activity


class _BrokenCache:
    def get(self, key):
        raise ConnectionError("cache down")

    def set(self, key, value, ttl_seconds):
        raise ConnectionError("cache down")

    def delete(self, key):
        raise ConnectionError("cache down")


def _profile(now, user_id="u1", activity=0):
    return UserProfile(
        user_id=user_id,
        interest_vector=[1.0, 0.0, 0.0, 0.0],
        source_affinity={"S1": 4.75},
        category_affinity={"sports": 4.75},
        last_computed_at=now,
        recent_activity_count=activity,
    )


class TestSmartTTL:
    @pytest.mark.parametrize(
        "activity,expected",
        [(50, 6 * 3600), (10, 6 * 3600), (9, 24 * 3600), (3, 24 * 3600), (2, 7 * 86400), (0, 7 * 86400)],
    )
    def test_ttl_tiers(self, config, activity, expected):
        assert ttl_for_activity(activity, config) == expected

    def test_put_uses_activity_tier(self, kv, config, now):
        cache = ProfileCache(kv, config)
        cache.put(_profile(now, activity=12))
        assert kv.ttl(profile_key("u1")) == pytest.approx(6 * 3600)


class TestProfileCache:
    def test_round_trip(self, kv, config, now):
        cache = ProfileCache(kv, config)
        profile = _profile(now)
        profile.negative_signals.sources.add("S9")

        assert cache.put(profile) is True
        loaded = cache.get("u1")

        assert loaded.model_dump() == profile.model_dump()

    def test_invalidate(self, kv, config, now):
        cache = ProfileCache(kv, config)
        cache.put(_profile(now))
        cache.invalidate("u1")
        assert cache.get("u1") is None

    def test_corrupt_entry_is_a_miss_and_removed(self, kv, config):
        kv.set(profile_key("u1"), "{not json", 60)
        cache = ProfileCache(kv, config)
        assert cache.get("u1") is None
        assert kv.get(profile_key("u1")) is None

    def test_backend_failures_are_misses(self, config, now):
        cache = ProfileCache(_BrokenCache(), config)
        assert cache.get("u1") is None
        assert cache.put(_profile(now)) is False
        cache.invalidate("u1")
        assert cache.get_or_build("u1", lambda uid: _profile(now, uid)).user_id == "u1"

    def test_get_or_build_caches_result(self, kv, config, now):
        cache = ProfileCache(kv, config)
        calls = []

        def build(uid):
            calls.append(uid)
            return _profile(now, uid)

        cache.get_or_build("u1", build)
        cache.get_or_build("u1", build)

        assert calls == ["u1"]

    def test_none_profile_is_not_cached(self, kv, config):
        cache = ProfileCache(kv, config)
        assert cache.get_or_build("u1", lambda uid: None) is None
        assert kv.get(profile_key("u1")) is None

    def test_concurrent_rebuilds_coalesce(self, kv, config, now):
        cache = ProfileCache(kv, config)
        calls = []
        lock = threading.Lock()

        def slow_build(uid):
            with lock:
                calls.append(uid)
            time.sleep(0.05)
            return _profile(now, uid)

        threads = [
            threading.Thread(target=cache.get_or_build, args=("u1", slow_build)) for _ in range(4)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert calls == ["u1"]

    def test_invalidate_during_rebuild_is_not_overwritten(self, kv, config, now):
        cache = ProfileCache(kv, config)

        def build(uid):
            # An interaction lands while the rebuild is reading the old log
            cache.invalidate(uid)
            return _profile(now, uid)

        profile = cache.get_or_build("u1", build)

        assert profile.user_id == "u1"
        assert kv.get(profile_key("u1")) is None

    def test_rebuild_after_invalidate_is_cached(self, kv, config, now):
        cache = ProfileCache(kv, config)
        cache.invalidate("u1")

        cache.get_or_build("u1", lambda uid: _profile(now, uid))

        assert cache.get("u1") is not None
