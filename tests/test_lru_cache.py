"""Unit tests for neuroshell.context.lru_cache."""

import random
import threading

import pytest

from neuroshell.context.lru_cache import (
    DEFAULT_CACHE_SIZE,
    DEFAULT_PINNED_VARIABLES,
    CacheStats,
    VariableLRUCache,
)


class TestBasicOperations:
    def test_get_missing_returns_none(self):
        assert VariableLRUCache(4).get("nope") is None

    def test_set_then_get(self):
        cache = VariableLRUCache(4)
        cache.set("a", "1")
        assert cache.get("a") == "1"

    def test_set_existing_updates_value_in_place(self):
        cache = VariableLRUCache(4)
        cache.set("a", "1")
        cache.set("a", "2")
        assert cache.get("a") == "2"
        assert len(cache) == 1

    def test_delete(self):
        cache = VariableLRUCache(4)
        cache.set("a", "1")
        cache.delete("a")
        cache.delete("missing")
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_get_all_returns_copy(self):
        cache = VariableLRUCache(4)
        cache.set("a", "1")
        snapshot = cache.get_all()
        snapshot["b"] = "2"
        assert cache.get_all() == {"a": "1"}

    def test_clear(self):
        cache = VariableLRUCache(4)
        cache.set("a", "1")
        cache.set("_status", "0")
        cache.clear()
        assert len(cache) == 0
        cache.set("b", "2")
        assert cache.get("b") == "2"

    def test_contains_does_not_promote(self):
        cache = VariableLRUCache(2)
        cache.set("a", "1")
        cache.set("b", "2")
        assert "a" in cache
        cache.set("c", "3")
        assert "a" not in cache

    @pytest.mark.parametrize("size", [0, -5])
    def test_non_positive_size_uses_default(self, size):
        assert VariableLRUCache(size).max_size == DEFAULT_CACHE_SIZE


class TestEviction:
    def test_scenario_oldest_entry_is_evicted(self):
        cache = VariableLRUCache(2)
        cache.set("a", "1")
        cache.set("b", "2")
        cache.set("c", "3")

        assert cache.get("a") is None
        assert cache.get("b") == "2"
        assert cache.get("c") == "3"

    def test_get_promotes_entry(self):
        cache = VariableLRUCache(2)
        cache.set("a", "1")
        cache.set("b", "2")
        cache.get("a")
        cache.set("c", "3")

        assert "a" in cache
        assert "b" not in cache

    def test_update_promotes_entry(self):
        cache = VariableLRUCache(2)
        cache.set("a", "1")
        cache.set("b", "2")
        cache.set("a", "10")
        cache.set("c", "3")

        assert cache.get("a") == "10"
        assert "b" not in cache

    def test_pinned_entries_are_never_evicted(self):
        cache = VariableLRUCache(2)
        cache.set("_status", "0")
        cache.set("a", "1")
        cache.set("b", "2")
        cache.set("c", "3")

        assert cache.get("_status") == "0"
        assert "a" not in cache
        assert "b" not in cache
        assert cache.get("c") == "3"

    def test_all_pinned_exceeds_capacity(self):
        cache = VariableLRUCache(2)
        for name in ("_output", "_error", "_status"):
            cache.set(name, "x")

        assert len(cache) == 3
        assert cache.stats().pinned_count == 3

    def test_evicts_exactly_one_entry_per_insert(self):
        cache = VariableLRUCache(3)
        for key in "abc":
            cache.set(key, key)
        cache.set("d", "d")
        assert len(cache) == 3

    def test_randomised_lru_order_matches_reference_model(self):
        rng = random.Random(1234)
        cache = VariableLRUCache(5)
        # Reference recency list of unpinned keys, oldest first.
        order: list[str] = []
        cache.set("_output", "pinned")

        for _ in range(500):
            key = f"k{rng.randrange(12)}"
            if rng.random() < 0.5:
                value = cache.get(key)
                if key in order:
                    assert value is not None
                    order.remove(key)
                    order.append(key)
                else:
                    assert value is None
            else:
                cache.set(key, "v")
                if key in order:
                    order.remove(key)
                order.append(key)
                if len(order) + 1 > 5:
                    evicted = order.pop(0)
                    assert evicted not in cache

            assert cache.get_all().keys() - {"_output"} == set(order)
            assert "_output" in cache


class TestPinning:
    def test_fresh_cache_reports_default_pins(self):
        cache = VariableLRUCache(10)
        for name in ("_output", "_error", "_status", "_elapsed"):
            assert cache.is_pinned(name)
        assert set(DEFAULT_PINNED_VARIABLES) >= {"_style", "_default_command", "_completion_mode"}
        assert not cache.is_pinned("user_var")

    def test_stats_count_only_present_pinned_keys(self):
        cache = VariableLRUCache(10)
        assert cache.stats() == CacheStats(size=0, max_size=10, pinned_count=0)

        cache.set("_output", "x")
        cache.set("_status", "0")
        cache.set("plain", "y")

        assert cache.stats() == CacheStats(size=3, max_size=10, pinned_count=2)

    def test_set_pinned_on_existing_entry_protects_it(self):
        cache = VariableLRUCache(2)
        cache.set("a", "1")
        cache.set_pinned("a", True)
        cache.set("b", "2")
        cache.set("c", "3")

        assert cache.get("a") == "1"
        assert "b" not in cache

    def test_unpinning_makes_entry_evictable(self):
        cache = VariableLRUCache(1)
        cache.set("_status", "0")
        cache.set_pinned("_status", False)
        cache.set("a", "1")

        assert not cache.is_pinned("_status")
        assert "_status" not in cache

    def test_pinned_get_does_not_change_order(self):
        cache = VariableLRUCache(2)
        cache.set("a", "1")
        cache.set("_status", "0")
        cache.set("b", "2")
        cache.get("_status")
        cache.set("c", "3")

        assert "a" not in cache
        assert cache.get("_status") == "0"


class TestConcurrency:
    def test_parallel_writers_keep_size_bounded(self):
        cache = VariableLRUCache(50)

        def writer(prefix: str) -> None:
            for i in range(500):
                cache.set(f"{prefix}{i}", str(i))
                cache.get(f"{prefix}{i // 2}")

        threads = [threading.Thread(target=writer, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 50
