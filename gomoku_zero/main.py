"""
Gomoku Zero Service - FastAPI Application
Provides move selection and position evaluation endpoints
"""

import logging
import time
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from . import __version__
from .ai.base import BaseAI
from .ai.evaluator import get_default_evaluator
from .ai.factory import create_ai
from .ai.transposition_store import get_default_store
from .config import DEFAULT_THINK_TIME_MS, LOG_LEVEL
from .core.logging_config import DEFAULT_FORMAT, configure_third_party_loggers
from .core.position import Position
from .errors import GomokuError, InvalidCoordinateError, InvalidStateError, UnknownSearchKindError
from .metrics import (
    MOVE_LATENCY,
    MOVE_REQUESTS,
    observe_move_start,
    record_cache_stats,
    record_search_stats,
)
from .models import Coordinate, HistoryEntry, Mark, SearchKind, SearchParams

# Configure logging
logging.basicConfig(level=LOG_LEVEL, format=DEFAULT_FORMAT)
configure_third_party_loggers()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Gomoku Zero Service",
    description="Move selection and evaluation for five-in-a-row",
    version=__version__,
)

_CLIENT_ERRORS = (InvalidCoordinateError, InvalidStateError, UnknownSearchKindError)


class MoveRequest(BaseModel):
    """Position (as a move history) plus search settings"""
    dim: int = Field(15, ge=5, le=50)
    history: List[HistoryEntry] = Field(default_factory=list)
    player: Mark
    search_kind: SearchKind = Field(SearchKind.ALPHA_BETA, alias="searchKind")
    think_time_ms: Optional[int] = Field(None, ge=0, alias="thinkTimeMs")
    params: SearchParams = Field(default_factory=SearchParams)
    seed: Optional[int] = None

    class Config:
        populate_by_name = True


class MoveResponse(BaseModel):
    move: Optional[Coordinate]
    score: Optional[int]
    search_kind: str
    thinking_time_ms: int
    status: str
    stats: Dict[str, Any] = Field(default_factory=dict)


class EvaluationRequest(BaseModel):
    dim: int = Field(15, ge=5, le=50)
    history: List[HistoryEntry] = Field(default_factory=list)
    player: Mark
    row: Optional[int] = None
    col: Optional[int] = None


class EvaluationResponse(BaseModel):
    score: int
    cell_score: Optional[int] = None
    threats: Optional[Dict[str, List[str]]] = None
    winner: Optional[Mark] = None


def _load_position(dim: int, history: List[HistoryEntry]) -> Position:
    return Position.from_history(dim, history)


def _client_error(e: GomokuError) -> HTTPException:
    return HTTPException(status_code=400, detail=e.to_dict())


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "service": "Gomoku Zero Service",
        "status": "running",
        "version": __version__,
    }


@app.get("/health")
async def health_check():
    """Health check for container orchestration"""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    record_cache_stats(_cache_tables())
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.post("/ai/move", response_model=MoveResponse)
async def get_ai_move(request: MoveRequest):
    """
    Get the engine's move for ``request.player``.

    Args:
        request: MoveRequest with history, player and search settings

    Returns:
        MoveResponse with the chosen cell, or status "draw" on a full board
    """
    start_time = time.time()
    kind_label = observe_move_start(request.search_kind.value)
    think_time = (
        request.think_time_ms
        if request.think_time_ms is not None
        else DEFAULT_THINK_TIME_MS
    )

    try:
        position = _load_position(request.dim, request.history)
        if request.player == Mark.EMPTY:
            raise InvalidStateError("The empty mark cannot move")

        if position.is_full():
            move = None
            ai: Optional[BaseAI] = None
        else:
            ai = create_ai(
                request.search_kind,
                request.player,
                think_time,
                request.params,
                request.seed,
            )
            move = ai.select_move(position)

        thinking_time = int((time.time() - start_time) * 1000)
        stats = ai.search_stats() if ai is not None else {}
        if ai is not None:
            record_search_stats(kind_label, stats)

        status = "ok" if move is not None else "draw"
        MOVE_REQUESTS.labels(kind_label, status).inc()
        MOVE_LATENCY.labels(kind_label).observe(time.time() - start_time)
        logger.info(
            "Move for %s via %s: %s (score=%s, %dms)",
            request.player.name,
            kind_label,
            move.co if move else None,
            move.score if move else None,
            thinking_time,
        )

        return MoveResponse(
            move=(
                Coordinate(row=move.co[0], col=move.co[1])
                if move is not None else None
            ),
            score=int(move.score) if move is not None else None,
            search_kind=kind_label,
            thinking_time_ms=thinking_time,
            status=status,
            stats=stats,
        )

    except _CLIENT_ERRORS as e:
        MOVE_REQUESTS.labels(kind_label, "rejected").inc()
        logger.warning("Rejected move request: %s", e)
        raise _client_error(e)
    except Exception as e:
        MOVE_REQUESTS.labels(kind_label, "error").inc()
        MOVE_LATENCY.labels(kind_label).observe(time.time() - start_time)
        logger.error("Error generating AI move: %s", str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/ai/evaluate", response_model=EvaluationResponse)
async def evaluate_position(request: EvaluationRequest):
    """
    Evaluate a position from ``request.player``'s perspective, and
    optionally the threats that player would make at one cell.
    """
    try:
        position = _load_position(request.dim, request.history)
        if request.player == Mark.EMPTY:
            raise InvalidStateError("The empty mark has no perspective")
        ai = create_ai(SearchKind.BASIC, request.player)
        score = ai.evaluate_position(position)

        cell_score = None
        threats = None
        if request.row is not None and request.col is not None:
            co = (request.row, request.col)
            if not position.in_bounds(*co):
                raise InvalidCoordinateError(
                    "Coordinate outside the board",
                    row=request.row, col=request.col, dim=position.dim,
                )
            evaluator = get_default_evaluator()
            cell_score = evaluator.evaluate(position, request.player, co)
            threats = evaluator.analyze_by_axis(position, request.player, co)

        return EvaluationResponse(
            score=score,
            cell_score=cell_score,
            threats=threats,
            winner=ai.has_winner(position),
        )

    except _CLIENT_ERRORS as e:
        raise _client_error(e)
    except Exception as e:
        logger.error("Error evaluating position: %s", str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/ai/cache/stats")
async def cache_stats():
    """Transposition and pattern cache statistics."""
    stats = get_default_store().stats()
    stats["patterns"] = get_default_evaluator().pattern_cache.stats()
    return stats


@app.delete("/ai/cache")
async def clear_cache():
    """Drop every cached evaluation."""
    get_default_store().clear()
    get_default_evaluator().clear()
    logger.info("Cleared transposition and pattern caches")
    return {"status": "cleared"}


def _cache_tables() -> Dict[str, Dict[str, Any]]:
    tables = {t.name: t.stats() for t in get_default_store().tables}
    pattern_cache = get_default_evaluator().pattern_cache
    tables[pattern_cache.name] = pattern_cache.stats()
    return tables


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
