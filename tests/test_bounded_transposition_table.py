"""Unit tests for BoundedTranspositionTable."""

import threading

import pytest

from gomoku_zero.ai.bounded_transposition_table import BoundedTranspositionTable


class TestBasicOperations:
    """Tests for basic get/put operations."""

    def test_put_and_get(self) -> None:
        """Should store and retrieve values."""
        table = BoundedTranspositionTable(max_entries=10)
        table.put(0xABCDEF, 1500)
        assert table.get(0xABCDEF) == 1500

    def test_missing_key_returns_none(self) -> None:
        table = BoundedTranspositionTable(max_entries=10)
        assert table.get(12345) is None

    def test_put_replaces_value(self) -> None:
        table = BoundedTranspositionTable(max_entries=10)
        table.put((1, (0, 1, 1)), ("a",))
        table.put((1, (0, 1, 1)), ("b",))
        assert table.get((1, (0, 1, 1))) == ("b",)
        assert len(table) == 1

    def test_zero_is_a_valid_value(self) -> None:
        """A heuristic of 0 is a hit, not a miss."""
        table = BoundedTranspositionTable(max_entries=10)
        table.put(7, 0)
        assert table.get(7) == 0
        assert table.hits == 1

    def test_contains_and_len(self) -> None:
        table = BoundedTranspositionTable(max_entries=10)
        table.put("k", 1)
        assert "k" in table
        assert "other" not in table
        assert len(table) == 1

    def test_clear_resets_counters(self) -> None:
        """Should clear all entries and reset stats."""
        table = BoundedTranspositionTable(max_entries=2)
        for key in range(4):
            table.put(key, key)
        table.get(3)
        table.get(0)
        table.clear()
        assert len(table) == 0
        assert (table.hits, table.misses, table.evictions) == (0, 0, 0)


class TestLRUEviction:
    """Tests for LRU eviction behavior."""

    def test_oldest_entry_evicted(self) -> None:
        table = BoundedTranspositionTable(max_entries=3)
        for key in "abc":
            table.put(key, key)
        table.put("d", "d")
        assert "a" not in table
        assert all(k in table for k in "bcd")
        assert table.evictions == 1

    def test_get_refreshes_entry(self) -> None:
        """A read moves the entry to the most recently used end."""
        table = BoundedTranspositionTable(max_entries=3)
        for key in "abc":
            table.put(key, key)
        table.get("a")
        table.put("d", "d")
        assert "a" in table
        assert "b" not in table

    def test_update_refreshes_entry(self) -> None:
        table = BoundedTranspositionTable(max_entries=3)
        for key in "abc":
            table.put(key, key)
        table.put("a", "A")
        table.put("d", "d")
        assert table.get("a") == "A"
        assert "b" not in table

    def test_never_exceeds_capacity(self) -> None:
        table = BoundedTranspositionTable(max_entries=50)
        for key in range(500):
            table.put(key, key)
        assert len(table) == 50
        assert table.evictions == 450


class TestStats:
    """Tests for statistics reporting."""

    def test_stats_fields(self) -> None:
        table = BoundedTranspositionTable(
            max_entries=100, entry_size_estimate=1024, name="heuristic"
        )
        table.put(1, 10)
        table.get(1)
        table.get(2)
        stats = table.stats()
        assert stats["name"] == "heuristic"
        assert stats["entries"] == 1
        assert stats["max_entries"] == 100
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == pytest.approx(0.5)
        assert stats["estimated_memory_mb"] == pytest.approx(1024 / (1024 * 1024))

    def test_hit_rate_without_lookups(self) -> None:
        assert BoundedTranspositionTable(max_entries=5).stats()["hit_rate"] == 0.0


class TestFromMemoryLimit:

    def test_entries_from_limit(self) -> None:
        table = BoundedTranspositionTable.from_memory_limit(
            1024 * 1024, entry_size_estimate=256, name="patterns"
        )
        assert table.max_entries == 4096
        assert table.name == "patterns"

    def test_minimum_entries(self) -> None:
        table = BoundedTranspositionTable.from_memory_limit(100)
        assert table.max_entries == 1000


class TestConcurrency:

    def test_concurrent_writers_respect_capacity(self) -> None:
        table = BoundedTranspositionTable(max_entries=64)

        def writer(offset: int) -> None:
            for i in range(2000):
                table.put(offset * 10_000 + i, i)
                table.get(offset * 10_000 + i // 2)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(table) <= 64
