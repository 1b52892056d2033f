"""
Core module - shared data types, YAML helpers, and configuration.
"""
from .types import (
    BULL,
    DOUBLE_BULL,
    CRICKET_NUMBERS,
    THROWS_PER_ROUND,
    GameType,
    label_for,
    DartOutcome,
    CheckoutStep,
    CheckoutGuide,
    ThrowRecord,
    ToggleRecord,
    BoardGeometry,
    RoundRecord,
    GameStats,
    GameRecord,
)
from .io_utils import (
    atomic_write_yaml,
    load_yaml,
    backup_file,
)
from .config_loader import Config

__all__ = [
    # Constants
    "BULL",
    "DOUBLE_BULL",
    "CRICKET_NUMBERS",
    "THROWS_PER_ROUND",
    # Types
    "GameType",
    "label_for",
    "DartOutcome",
    "CheckoutStep",
    "CheckoutGuide",
    "ThrowRecord",
    "ToggleRecord",
    "BoardGeometry",
    "RoundRecord",
    "GameStats",
    "GameRecord",
    # I/O
    "atomic_write_yaml",
    "load_yaml",
    "backup_file",
    # Config
    "Config",
]
