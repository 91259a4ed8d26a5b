"""Bounded transposition table with LRU eviction and serialized writes."""

from __future__ import annotations

import threading
from collections import OrderedDict
from collections.abc import Hashable
from typing import Any


class BoundedTranspositionTable:
    """LRU-evicting table shared between searches.

    Writers take a per-table lock. Readers never take it: a lookup is a
    single dict read, and a racing eviction only turns a hit into a miss.
    """

    def __init__(
        self, max_entries: int = 100_000, entry_size_estimate: int = 256,
        name: str = "tt",
    ) -> None:
        """Initialize the table.

        Args:
            max_entries: Entry count at which the least recent entry is dropped
            entry_size_estimate: Rough bytes per entry, used only in stats
            name: Label used in stats and metrics
        """
        self._table: OrderedDict[Hashable, Any] = OrderedDict()
        self._write_lock = threading.Lock()
        self.max_entries = max_entries
        self.entry_size_estimate = entry_size_estimate
        self.name = name
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    @classmethod
    def from_memory_limit(
        cls, memory_limit_bytes: int, entry_size_estimate: int = 256,
        name: str = "tt",
    ) -> "BoundedTranspositionTable":
        """Size a table from a byte budget instead of an entry count.

        Args:
            memory_limit_bytes: Byte budget for the whole table
            entry_size_estimate: Rough bytes per entry

        Returns:
            A table holding at least 1000 entries
        """
        max_entries = max(1000, memory_limit_bytes // entry_size_estimate)
        return cls(
            max_entries=max_entries,
            entry_size_estimate=entry_size_estimate,
            name=name,
        )

    def get(self, key: Hashable) -> Any | None:
        """Look up ``key`` and mark it most recently used.

        Args:
            key: Position key, or any hashable cache key

        Returns:
            The cached value, or None on a miss
        """
        value = self._table.get(key)
        if value is None:
            self.misses += 1
            return None
        try:
            self._table.move_to_end(key)
        except KeyError:
            # Evicted by a concurrent writer; the value read is still valid.
            pass
        self.hits += 1
        return value

    def put(self, key: Hashable, value: Any) -> None:
        """Add entry, evicting the oldest if at capacity.

        Args:
            key: Position key, or any hashable cache key
            value: The value to store; ``None`` is not storable
        """
        with self._write_lock:
            if key in self._table:
                self._table.move_to_end(key)
            else:
                while len(self._table) >= self.max_entries:
                    self._table.popitem(last=False)
                    self.evictions += 1
            self._table[key] = value

    def __contains__(self, key: Hashable) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def clear(self) -> None:
        with self._write_lock:
            self._table.clear()
            self.hits = 0
            self.misses = 0
            self.evictions = 0

    def stats(self) -> dict[str, Any]:
        """Return table statistics.

        Returns:
            Dict with entries, max_entries, hit/miss counts and hit rate
        """
        total = self.hits + self.misses
        return {
            "name": self.name,
            "entries": len(self._table),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": self.hits / total if total else 0.0,
            "estimated_memory_mb": (
                len(self._table) * self.entry_size_estimate / (1024 * 1024)
            ),
        }
