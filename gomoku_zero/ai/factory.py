"""AI factory and the move-request entry point.

Usage:
    from gomoku_zero.ai.factory import request_move
    from gomoku_zero.models import Mark, SearchKind, SearchParams

    move = request_move(
        position, Mark.WHITE, 2000, SearchKind.ALPHA_BETA,
        SearchParams(depth=4, breadth=6),
    )
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..core.position import Position
from ..errors import InvalidStateError, UnknownSearchKindError
from ..models import AIConfig, Mark, Move, SearchKind, SearchParams
from .base import BaseAI
from .evaluator import ThreatEvaluator
from .transposition_store import TranspositionStore

logger = logging.getLogger(__name__)


class AIFactory:
    """Centralized factory for creating search instances.

    Built-in kinds are loaded lazily. Extra strategies can be registered at
    runtime under their own identifiers.
    """

    _custom_registry: dict[str, Callable[..., BaseAI]] = {}
    _class_cache: dict[SearchKind, type[BaseAI]] = {}

    @classmethod
    def register(cls, identifier: str, constructor: Callable[..., BaseAI]) -> None:
        """Register a custom strategy.

        Args:
            identifier: Unique string identifier
            constructor: Callable accepting (player, config, evaluator, store)
        """
        if identifier in cls._custom_registry:
            logger.warning("Overwriting existing custom AI: %s", identifier)
        cls._custom_registry[identifier] = constructor
        logger.debug("Registered custom AI: %s", identifier)

    @classmethod
    def unregister(cls, identifier: str) -> bool:
        if identifier in cls._custom_registry:
            del cls._custom_registry[identifier]
            logger.debug("Unregistered custom AI: %s", identifier)
            return True
        return False

    @classmethod
    def list_registered(cls) -> dict[str, str]:
        result = {kind.value: f"Built-in: {kind.name}" for kind in SearchKind}
        for identifier, constructor in cls._custom_registry.items():
            doc = getattr(constructor, "__doc__", None) or "Custom AI"
            result[identifier] = f"Custom: {doc.splitlines()[0]}"
        return result

    @classmethod
    def _get_ai_class(cls, kind: SearchKind) -> type[BaseAI]:
        if kind in cls._class_cache:
            return cls._class_cache[kind]

        if kind == SearchKind.BASIC:
            from .basic_ai import BasicAI
            ai_class: type[BaseAI] = BasicAI
        elif kind in (SearchKind.ALPHA_BETA, SearchKind.ALPHA_BETA_HORIZON):
            from .minimax_ai import MinimaxAI
            ai_class = MinimaxAI
        elif kind == SearchKind.MONTE_CARLO:
            from .mcts_ai import MCTSAI
            ai_class = MCTSAI
        else:
            raise UnknownSearchKindError(
                f"Unsupported search kind: {kind}", context={"kind": str(kind)}
            )

        cls._class_cache[kind] = ai_class
        return ai_class

    @classmethod
    def create(
        cls,
        kind: SearchKind | str,
        player: Mark,
        config: Optional[AIConfig] = None,
        evaluator: Optional[ThreatEvaluator] = None,
        store: Optional[TranspositionStore] = None,
    ) -> BaseAI:
        """Create a search instance.

        Raises:
            UnknownSearchKindError: If ``kind`` is neither built in nor registered
        """
        config = config or AIConfig()
        if isinstance(kind, str) and kind in cls._custom_registry:
            return cls._custom_registry[kind](player, config, evaluator, store)
        try:
            kind = SearchKind(kind)
        except ValueError as e:
            raise UnknownSearchKindError(
                f"Unsupported search kind: {kind}", context={"kind": str(kind)}
            ) from e

        ai_class = cls._get_ai_class(kind)
        if kind == SearchKind.ALPHA_BETA_HORIZON:
            from .horizon import HorizonExtension
            params = config.params
            hook = HorizonExtension(
                probability=params.rollout_probability,
                threshold=params.rollout_threshold,
                depth=params.rollout_depth,
            )
            return ai_class(player, config, evaluator, store, leaf_hook=hook)
        return ai_class(player, config, evaluator, store)

    @classmethod
    def clear_cache(cls) -> None:
        cls._class_cache.clear()


def create_ai(
    kind: SearchKind | str,
    player: Mark,
    think_time_ms: Optional[int] = None,
    params: Optional[SearchParams] = None,
    seed: Optional[int] = None,
    evaluator: Optional[ThreatEvaluator] = None,
    store: Optional[TranspositionStore] = None,
) -> BaseAI:
    config = AIConfig(
        think_time=think_time_ms,
        rng_seed=seed,
        params=params or SearchParams(),
    )
    return AIFactory.create(kind, player, config, evaluator, store)


def request_move(
    position: Position,
    player: Mark,
    think_time_ms: Optional[int],
    kind: SearchKind | str = SearchKind.ALPHA_BETA,
    params: Optional[SearchParams] = None,
    seed: Optional[int] = None,
    evaluator: Optional[ThreatEvaluator] = None,
    store: Optional[TranspositionStore] = None,
) -> Optional[Move]:
    """
    Best move for ``player`` on ``position`` within the time budget.

    The position is borrowed and handed back unchanged.

    Returns:
        A move on an empty cell, or None when the board is full (a draw)

    Raises:
        InvalidStateError: If ``player`` is EMPTY
        UnknownSearchKindError: If ``kind`` is not a known strategy
    """
    if player == Mark.EMPTY:
        raise InvalidStateError("The empty mark cannot move")
    if position.is_full():
        return None
    ai = create_ai(kind, player, think_time_ms, params, seed, evaluator, store)
    return ai.select_move(position)
