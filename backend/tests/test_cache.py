import time

from services.cache import (
    CacheSweeper,
    RecommendationCache,
    analytics_key,
    build_cache_key,
    profile_pattern,
)


class TestCacheKeys:
    def test_deterministic_regardless_of_param_order(self):
        a = build_cache_key("job_recommendations", "p1", {"limit": 10, "filters": {"b": 1, "a": 2}})
        b = build_cache_key("job_recommendations", "p1", {"filters": {"a": 2, "b": 1}, "limit": 10})
        assert a == b

    def test_different_params_give_different_keys(self):
        a = build_cache_key("job_recommendations", "p1", {"limit": 10})
        b = build_cache_key("job_recommendations", "p1", {"limit": 5})
        assert a != b

    def test_key_shape(self):
        key = build_cache_key("job_recommendations", "p1", {"limit": 10})
        prefix, profile_id, encoded = key.split(":")
        assert prefix == "job_recommendations"
        assert profile_id == "p1"
        assert encoded


class TestRecommendationCache:
    def test_set_then_get(self, fake_clock):
        cache = RecommendationCache(clock=fake_clock)
        cache.set("k", "v", 60)
        assert cache.get("k") == "v"

    def test_missing_key(self, fake_clock):
        assert RecommendationCache(clock=fake_clock).get("nope") is None

    def test_expired_entry_is_a_miss_before_any_sweep(self, fake_clock):
        cache = RecommendationCache(clock=fake_clock)
        cache.set("k", "v", 60)
        fake_clock.advance(59)
        assert cache.get("k") == "v"
        fake_clock.advance(1)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_set_overwrites_and_extends(self, fake_clock):
        cache = RecommendationCache(clock=fake_clock)
        cache.set("k", "old", 10)
        fake_clock.advance(5)
        cache.set("k", "new", 10)
        fake_clock.advance(7)
        assert cache.get("k") == "new"

    def test_sweep_purges_only_expired(self, fake_clock):
        cache = RecommendationCache(clock=fake_clock)
        cache.set("short", "1", 10)
        cache.set("long", "2", 100)
        fake_clock.advance(50)
        assert cache.sweep() == 1
        assert len(cache) == 1
        assert cache.get("long") == "2"

    def test_sweep_uses_each_entry_ttl(self, fake_clock):
        cache = RecommendationCache(clock=fake_clock)
        cache.set("a", "1", 10)
        fake_clock.advance(5)
        cache.set("b", "2", 10)
        fake_clock.advance(6)
        assert cache.sweep() == 1
        assert cache.get("a") is None
        assert cache.get("b") == "2"
        fake_clock.advance(4)
        assert cache.sweep() == 1
        assert len(cache) == 0

    def test_non_positive_ttl_drops_existing_entry(self, fake_clock):
        cache = RecommendationCache(clock=fake_clock)
        cache.set("k", "v", 60)
        cache.set("k", "w", 0)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_maxsize_evicts_least_recently_used(self, fake_clock):
        cache = RecommendationCache(clock=fake_clock, maxsize=2)
        cache.set("a", "1", 60)
        cache.set("b", "2", 60)
        assert cache.get("a") == "1"
        cache.set("c", "3", 60)
        assert len(cache) == 2
        assert cache.get("b") is None
        assert cache.get("a") == "1"
        assert cache.get("c") == "3"

    def test_clear(self, fake_clock):
        cache = RecommendationCache(clock=fake_clock)
        cache.set("a", "1", 10)
        cache.clear()
        assert len(cache) == 0


class TestInvalidate:
    def setup_method(self):
        self.cache = RecommendationCache(clock=lambda: 0.0)
        for key in [
            build_cache_key("job_recommendations", "p1", {"limit": 10}),
            build_cache_key("job_recommendations", "p1", {"limit": 5}),
            build_cache_key("job_recommendations", "p2", {"limit": 10}),
            "similar_jobs:j1:p1:5",
            analytics_key("p1"),
            analytics_key("p2"),
        ]:
            self.cache.set(key, "x", 60)

    def test_profile_pattern_clears_only_that_profile(self):
        removed = self.cache.invalidate(profile_pattern("p1"))
        assert removed == 3
        assert self.cache.get(build_cache_key("job_recommendations", "p2", {"limit": 10})) == "x"

    def test_trailing_wildcard(self):
        assert self.cache.invalidate("job_recommendations:p1:*") == 2

    def test_leading_wildcard(self):
        assert self.cache.invalidate("*:p2") == 1

    def test_exact_key(self):
        assert self.cache.invalidate("analytics:p1") == 1
        assert self.cache.invalidate("analytics:p1") == 0

    def test_invalidate_profile_includes_analytics(self):
        assert self.cache.invalidate_profile("p1") == 4
        assert self.cache.get(analytics_key("p1")) is None
        assert self.cache.get(analytics_key("p2")) == "x"


class TestCacheSweeper:
    def test_background_sweep_purges_expired(self):
        clock = [0.0]
        cache = RecommendationCache(clock=lambda: clock[0])
        cache.set("k", "v", 1)
        clock[0] = 5.0

        sweeper = CacheSweeper(cache, interval_seconds=0.01)
        sweeper.start()
        try:
            assert sweeper.running
            deadline = time.monotonic() + 2
            while len(cache) and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            sweeper.stop(timeout=1)

        assert len(cache) == 0
        assert not sweeper.running

    def test_start_twice_is_harmless(self):
        sweeper = CacheSweeper(RecommendationCache(), interval_seconds=60)
        sweeper.start()
        sweeper.start()
        sweeper.stop(timeout=1)
        assert not sweeper.running
