"""
Engine settings read from the environment.

Module-level constants are resolved once at import, the same way the move
cache flags are. ``EngineSettings.from_env()`` re-reads them for callers (and
tests) that need a fresh snapshot after changing the environment.
"""

import os
from dataclasses import dataclass

from .errors import ConfigurationError


def _env_int(key: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(key, str(default))
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{key} must be an integer, got {raw!r}", key=key
        ) from e
    if value < minimum:
        raise ConfigurationError(
            f"{key} must be >= {minimum}, got {value}", key=key
        )
    return value


def _env_bool(key: str, default: bool) -> bool:
    return os.getenv(key, 'true' if default else 'false').lower() == 'true'


@dataclass(frozen=True)
class EngineSettings:
    """Process-wide engine knobs.

    Attributes:
        strict_equality: Cache keys compare cell-by-cell instead of by hash.
        tt_max_entries: LRU bound for each transposition cache.
        pattern_cache_max: LRU bound for the line-pattern cache.
        active_radius: Chebyshev distance from a mark that makes a cell a
            candidate.
        reuse_score_maps: Rebuild score maps from the previous position
            when the last move is known.
        default_think_time_ms: Budget for requests that do not name one.
        log_level: Level name for the service logger.
    """
    strict_equality: bool = False
    tt_max_entries: int = 200_000
    pattern_cache_max: int = 500_000
    active_radius: int = 2
    reuse_score_maps: bool = True
    default_think_time_ms: int = 3000
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            strict_equality=_env_bool('GOMOKU_STRICT_EQUALITY', False),
            tt_max_entries=_env_int('GOMOKU_TT_MAX_ENTRIES', 200_000, 1),
            pattern_cache_max=_env_int('GOMOKU_PATTERN_CACHE_MAX', 500_000, 1),
            active_radius=_env_int('GOMOKU_ACTIVE_RADIUS', 2, 1),
            reuse_score_maps=_env_bool('GOMOKU_REUSE_SCORE_MAPS', True),
            default_think_time_ms=_env_int(
                'GOMOKU_DEFAULT_THINK_TIME_MS', 3000
            ),
            log_level=os.getenv('GOMOKU_LOG_LEVEL', 'INFO').upper(),
        )


SETTINGS = EngineSettings.from_env()

STRICT_EQUALITY = SETTINGS.strict_equality
TT_MAX_ENTRIES = SETTINGS.tt_max_entries
PATTERN_CACHE_MAX = SETTINGS.pattern_cache_max
ACTIVE_RADIUS = SETTINGS.active_radius
REUSE_SCORE_MAPS = SETTINGS.reuse_score_maps
DEFAULT_THINK_TIME_MS = SETTINGS.default_think_time_ms
LOG_LEVEL = SETTINGS.log_level
