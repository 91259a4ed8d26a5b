"""Gomoku Zero: move selection for five-in-a-row on an N x N board."""

__version__ = "1.0.0"
