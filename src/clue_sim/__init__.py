"""Clue deduction simulator: knowledge sheets, heuristic AI players and a turn controller."""

__version__ = "0.1.0"
