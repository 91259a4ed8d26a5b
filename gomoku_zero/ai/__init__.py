"""Search strategies for Gomoku Zero.

The recommended entry point is the factory:

    from gomoku_zero.ai import request_move, SearchKind

    move = request_move(position, Mark.BLACK, 2000, SearchKind.MONTE_CARLO)

Modules:
- threats.py: threat taxonomy, weights, line windows and classification
- evaluator.py: ThreatEvaluator with the shared pattern cache
- transposition_store.py: heuristic, ordered-move and score-map caches
- move_ordering.py: candidate generation with score-map reuse
- base.py: BaseAI, the capabilities every strategy shares
- basic_ai.py: one-ply greedy policy
- minimax_ai.py: alpha-beta search with a pluggable leaf hook
- horizon.py: HorizonExtension leaf hook
- mcts_ai.py: Monte Carlo tree search
"""

from gomoku_zero.ai.base import BaseAI
from gomoku_zero.ai.factory import AIFactory, create_ai, request_move
from gomoku_zero.models import SearchKind

_AI_CLASSES = {
    "BasicAI": "gomoku_zero.ai.basic_ai",
    "MinimaxAI": "gomoku_zero.ai.minimax_ai",
    "MCTSAI": "gomoku_zero.ai.mcts_ai",
    "HorizonExtension": "gomoku_zero.ai.horizon",
}


def __getattr__(name: str):
    """Lazy loading for strategy classes."""
    if name in _AI_CLASSES:
        import importlib
        module = importlib.import_module(_AI_CLASSES[name])
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "AIFactory",
    "BaseAI",
    "BasicAI",
    "HorizonExtension",
    "MCTSAI",
    "MinimaxAI",
    "SearchKind",
    "create_ai",
    "request_move",
]
