"""Prometheus metrics for the Gomoku Zero service.

Counters and histograms live here so that request handlers can record
telemetry without owning metric instances. Labels are kept coarse (search
kind, outcome, cache name) to stay cheap in local Prometheus setups.
"""

from __future__ import annotations

from typing import Any, Final, Mapping

from prometheus_client import Counter, Gauge, Histogram


MOVE_REQUESTS: Final[Counter] = Counter(
    "gomoku_move_requests_total",
    "Total number of /ai/move requests, labeled by search_kind and outcome.",
    labelnames=("search_kind", "outcome"),
)

MOVE_LATENCY: Final[Histogram] = Histogram(
    "gomoku_move_latency_seconds",
    "Latency of /ai/move requests in seconds, labeled by search_kind.",
    labelnames=("search_kind",),
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

SEARCH_NODES: Final[Counter] = Counter(
    "gomoku_search_nodes_total",
    "Search nodes visited, labeled by search_kind.",
    labelnames=("search_kind",),
)

ALPHA_BETA_CUTS: Final[Counter] = Counter(
    "gomoku_alpha_beta_cuts_total",
    "Alpha-beta cutoffs, labeled by kind (alpha or beta).",
    labelnames=("kind",),
)

HORIZON_ROLLOUTS: Final[Counter] = Counter(
    "gomoku_horizon_rollouts_total",
    "Secondary searches started by the horizon extension.",
)

MCTS_ITERATIONS: Final[Counter] = Counter(
    "gomoku_mcts_iterations_total",
    "Completed Monte Carlo iterations.",
)

CACHE_LOOKUPS: Final[Counter] = Counter(
    "gomoku_cache_lookups_total",
    "Transposition cache lookups, labeled by cache and outcome.",
    labelnames=("cache", "outcome"),
)

CACHE_ENTRIES: Final[Gauge] = Gauge(
    "gomoku_cache_entries",
    "Current number of entries per transposition cache.",
    labelnames=("cache",),
)


def observe_move_start(search_kind: str) -> str:
    """Normalise the search kind into a label value for a new request."""
    return str(search_kind)


def record_search_stats(search_kind: str, stats: Mapping[str, Any]) -> None:
    """Fold one search's statistics into the process counters."""
    SEARCH_NODES.labels(search_kind).inc(stats.get("nodes_visited", 0))
    if "alpha_cuts" in stats:
        ALPHA_BETA_CUTS.labels("alpha").inc(stats["alpha_cuts"])
        ALPHA_BETA_CUTS.labels("beta").inc(stats["beta_cuts"])
    if stats.get("horizon_rollouts"):
        HORIZON_ROLLOUTS.inc(stats["horizon_rollouts"])
    if "iterations" in stats:
        MCTS_ITERATIONS.inc(stats["iterations"])


def record_cache_stats(table_stats: Mapping[str, Mapping[str, Any]]) -> None:
    """Publish per-table sizes and cumulative hit/miss deltas.

    ``table_stats`` maps a cache name to ``BoundedTranspositionTable.stats()``.
    Counters can only increase, so only the growth since the last call is
    added.
    """
    for name, stats in table_stats.items():
        CACHE_ENTRIES.labels(name).set(stats["entries"])
        for outcome in ("hits", "misses"):
            seen = _last_seen.get((name, outcome), 0)
            current = stats[outcome]
            if current >= seen:
                CACHE_LOOKUPS.labels(name, outcome).inc(current - seen)
            _last_seen[(name, outcome)] = current


_last_seen: dict[tuple[str, str], int] = {}
