"""Unified logging configuration.

One place to build loggers with consistent formatting for the service, the
command-line helpers and the tests. Library modules still use the plain
``logging.getLogger(__name__)`` pattern; only entry points call
``setup_logging``.

Usage:
    from gomoku_zero.core.logging_config import setup_logging

    logger = setup_logging("gomoku_zero", level="DEBUG")
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

__all__ = [
    "COMPACT_FORMAT",
    "DEFAULT_FORMAT",
    "DETAILED_FORMAT",
    "STRUCTURED_FORMAT",
    "LogContext",
    "configure_third_party_loggers",
    "get_logger",
    "setup_logging",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
COMPACT_FORMAT = "%(levelname)s %(name)s: %(message)s"
DETAILED_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(filename)s:%(lineno)d - %(message)s"
)
STRUCTURED_FORMAT = (
    '{"time": "%(asctime)s", "logger": "%(name)s", '
    '"level": "%(levelname)s", "message": "%(message)s"}'
)

_FORMATS = {
    "default": DEFAULT_FORMAT,
    "compact": COMPACT_FORMAT,
    "detailed": DETAILED_FORMAT,
    "structured": STRUCTURED_FORMAT,
}

_NOISY_PACKAGES = ("urllib3", "httpx", "httpcore", "asyncio", "uvicorn.access")


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        return resolved if isinstance(resolved, int) else logging.INFO
    return level


def setup_logging(
    name: str,
    level: int | str = logging.INFO,
    format_style: str = "default",
    log_file: str | Path | None = None,
    log_dir: str | Path | None = None,
    console: bool = True,
    propagate: bool = False,
) -> logging.Logger:
    """Configure and return a named logger.

    Calling this twice for the same name does not stack handlers.

    Args:
        name: Logger name
        level: Level as an int or a level name
        format_style: One of default, compact, detailed, structured
        log_file: Optional file to append to
        log_dir: Optional directory; a ``<name>.log`` file is created there
        console: Attach a stderr handler
        propagate: Forward records to ancestor loggers

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))
    logger.propagate = propagate

    formatter = logging.Formatter(_FORMATS.get(format_style, DEFAULT_FORMAT))

    if log_file is None and log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        log_file = directory / f"{name.replace('.', '_')}.log"

    if console and not any(
        type(h) is logging.StreamHandler for h in logger.handlers
    ):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if log_file is not None:
        target = str(Path(log_file).resolve())
        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in logger.handlers
        ):
            handler = logging.FileHandler(target)
            handler.setFormatter(formatter)
            logger.addHandler(handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def configure_third_party_loggers(
    quiet: bool = True, verbose_packages: list[str] | None = None
) -> None:
    """Raise chatty dependency loggers to WARNING unless listed as verbose."""
    if not quiet:
        return
    keep = set(verbose_packages or ())
    for package in _NOISY_PACKAGES:
        if package not in keep:
            logging.getLogger(package).setLevel(logging.WARNING)


class LogContext:
    """Temporarily change a logger's level.

    Example:
        with LogContext(logger, logging.DEBUG):
            ai.select_move(position)
    """

    def __init__(self, logger: logging.Logger, level: int | str):
        self.logger = logger
        self.level = _resolve_level(level)
        self._previous = logger.level

    def __enter__(self) -> logging.Logger:
        self._previous = self.logger.level
        self.logger.setLevel(self.level)
        return self.logger

    def __exit__(self, exc_type, exc, tb) -> None:
        self.logger.setLevel(self._previous)
