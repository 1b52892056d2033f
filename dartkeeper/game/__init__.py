"""
Game module - rulesets, turn state, checkout hints, and game history.
"""
from .rules import (
    GameMode,
    Mode01,
    ModeCricket,
    ModeCountUp,
    ThrowResult,
    get_game_mode,
    score_rounds,
)
from .checkout import CheckoutSolver, get_checkout_guide, list_checkout_labels
from .stats import compute_stats
from .game_state import GameStateMachine
from .history import HistoryStore

__all__ = [
    "GameMode",
    "Mode01",
    "ModeCricket",
    "ModeCountUp",
    "ThrowResult",
    "get_game_mode",
    "score_rounds",
    "CheckoutSolver",
    "get_checkout_guide",
    "list_checkout_labels",
    "compute_stats",
    "GameStateMachine",
    "HistoryStore",
]
