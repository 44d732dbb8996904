"""Tests for imageschedule.cache (schedule memoization)."""

import threading

import pytest

from imageschedule import Schedule, ScheduleCache, ScheduleConfig, compute_schedule


class TestScheduleCache:
    """Tests for hit/miss behaviour."""

    def test_identical_input_hits(self):
        cache = ScheduleCache()
        first = cache.get_or_compute([0, 8_000])
        second = cache.get_or_compute([0, 8_000])
        assert second is first
        assert cache.stats()["hits"] == 1
        assert cache.stats()["misses"] == 1

    def test_matches_uncached_result(self, burst_times):
        cache = ScheduleCache()
        config = ScheduleConfig(max_slots=2)
        assert cache.get_or_compute(burst_times, config) == compute_schedule(burst_times, config)

    def test_changed_time_misses(self):
        cache = ScheduleCache()
        first = cache.get_or_compute([0, 8_000])
        second = cache.get_or_compute([0, 8_001])
        assert second is not first
        assert len(cache) == 2

    def test_changed_config_misses(self):
        cache = ScheduleCache()
        cache.get_or_compute([0, 8_000], ScheduleConfig(max_slots=2))
        cache.get_or_compute([0, 8_000], ScheduleConfig(max_slots=3))
        assert cache.stats()["misses"] == 2

    def test_equivalent_configs_share_entry(self):
        """Test that configs equal after clamping hit the same entry."""
        cache = ScheduleCache()
        first = cache.get_or_compute([0], ScheduleConfig(min_visible_ms=10))
        second = cache.get_or_compute([0], ScheduleConfig(min_visible_ms=1_000))
        assert second is first

    def test_item_shape_does_not_matter(self):
        cache = ScheduleCache()
        first = cache.get_or_compute([0, 5_000])
        second = cache.get_or_compute([{"timestamp": 0}, {"time_ms": 5_000}])
        assert second is first

    def test_custom_resolver(self):
        cache = ScheduleCache()
        schedule = cache.get_or_compute([{"at": 1_000}], resolver=lambda item: item["at"])
        assert schedule.metadata[0].start_ms == 1_000

    def test_empty_input_not_cached(self):
        cache = ScheduleCache()
        assert cache.get_or_compute([]) == Schedule.empty()
        assert len(cache) == 0


class TestScheduleCacheEviction:
    """Tests for LRU eviction and maintenance."""

    def test_least_recently_used_evicted(self):
        cache = ScheduleCache(max_entries=2)
        a = cache.get_or_compute([0])
        cache.get_or_compute([1_000])
        cache.get_or_compute([0])  # refresh a
        cache.get_or_compute([2_000])  # evicts [1_000]
        assert len(cache) == 2
        assert cache.get_or_compute([0]) is a
        misses = cache.stats()["misses"]
        cache.get_or_compute([1_000])
        assert cache.stats()["misses"] == misses + 1

    def test_clear(self):
        cache = ScheduleCache()
        cache.get_or_compute([0])
        cache.clear()
        assert len(cache) == 0
        assert cache.stats() == {"hits": 0, "misses": 0, "size": 0, "max_entries": 32}

    def test_invalid_max_entries(self):
        with pytest.raises(ValueError, match="max_entries must be >= 1"):
            ScheduleCache(max_entries=0)

    def test_concurrent_access(self, burst_times):
        cache = ScheduleCache(max_entries=4)
        results = []

        def worker():
            for _ in range(20):
                results.append(cache.get_or_compute(burst_times))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 80
        assert all(result == results[0] for result in results)
        assert len(cache) == 1
