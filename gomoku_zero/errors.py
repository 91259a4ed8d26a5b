"""
Gomoku Zero Error Hierarchy

Unified exception hierarchy for the engine and the service. All custom
exceptions inherit from GomokuError so callers can catch them together.

Only InvalidCoordinateError is expected to escape a move request. Running
out of candidates or out of time is handled inside the searches and never
surfaces as an exception.

Usage:
    from gomoku_zero.errors import InvalidCoordinateError

    try:
        position.place((row, col), Mark.BLACK)
    except InvalidCoordinateError as e:
        logger.warning("Rejected move: %s", e)
"""

from typing import Any

__all__ = [
    "AIError",
    "ConfigurationError",
    "GomokuError",
    "InvalidCoordinateError",
    "InvalidStateError",
    "UnknownSearchKindError",
]


class GomokuError(Exception):
    """Base exception for all Gomoku Zero errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "GOMOKU_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Board Errors
# =============================================================================


class InvalidCoordinateError(GomokuError):
    """A placement or removal that the board cannot honour.

    Raised for coordinates outside ``[0, dim)``, placing on an occupied
    cell, removing from an empty cell, or placing the EMPTY mark.
    """
    code: str = "INVALID_COORDINATE"

    def __init__(
        self,
        message: str,
        row: int | None = None,
        col: int | None = None,
        dim: int | None = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", {})
        if row is not None:
            context["row"] = row
        if col is not None:
            context["col"] = col
        if dim is not None:
            context["dim"] = dim
        super().__init__(message, context=context, **kwargs)
        self.row = row
        self.col = col
        self.dim = dim


class InvalidStateError(GomokuError):
    """Board or history is malformed, or a mark was used where it has no meaning."""
    code: str = "INVALID_STATE"


# =============================================================================
# AI Errors
# =============================================================================


class AIError(GomokuError):
    """Base class for search failures."""
    code: str = "AI_ERROR"


class UnknownSearchKindError(AIError):
    """The requested search kind has no implementation."""
    code: str = "UNKNOWN_SEARCH_KIND"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(GomokuError):
    """An environment variable or parameter holds an unusable value.

    Attributes:
        key: Name of the offending setting
    """
    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, key: str | None = None, **kwargs: Any):
        context = kwargs.pop("context", {})
        if key:
            context["key"] = key
        super().__init__(message, context=context, **kwargs)
        self.key = key
