"""
Board module - dartboard geometry and scoring.
"""
from .geometry import ScoreResolver, resolve_score

__all__ = [
    "ScoreResolver",
    "resolve_score",
]
