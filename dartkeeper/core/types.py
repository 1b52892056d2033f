"""
Core data types for the darts scoring engine.
Defines contracts between modules to ensure stable interfaces.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


BULL = 25
DOUBLE_BULL = 50
CRICKET_NUMBERS: Tuple[int, ...] = (15, 16, 17, 18, 19, 20, 25)
THROWS_PER_ROUND = 3


class GameType(Enum):
    """Ruleset variants known to the engine."""
    X01 = "01"
    CRICKET = "cricket"
    COUNT_UP = "count_up"

    @classmethod
    def parse(cls, value: Union["GameType", str]) -> "GameType":
        """Accept either an enum member or its wire value ("01", "cricket", ...)."""
        if isinstance(value, GameType):
            return value
        return cls(str(value))


def label_for(score: int, multiplier: int) -> str:
    """
    Canonical label for a (score, multiplier) pair.

    Examples: "Miss", "S-Bull", "D-Bull", "S20", "D16", "T19".
    """
    if score == 0:
        return "Miss"
    if score == DOUBLE_BULL or (score == BULL and multiplier == 2):
        return "D-Bull"
    if score == BULL:
        return "S-Bull"
    prefix = {3: "T", 2: "D"}.get(multiplier, "S")
    return f"{prefix}{score}"


@dataclass(frozen=True)
class DartOutcome:
    """
    A single resolved dart.

    The label is always derived from (score, multiplier) and never stored.
    """
    score: int  # 0 (miss), 1-20, 25 (bull) or 50 (inner bull from the resolver)
    multiplier: int = 1  # 1=Single, 2=Double, 3=Triple
    is_inner: bool = False  # Inner single band (between bull and triple ring)

    @property
    def label(self) -> str:
        return label_for(self.score, self.multiplier)

    @property
    def value(self) -> int:
        """Raw points (score * multiplier), without any ruleset adjustment."""
        return self.score * self.multiplier

    @property
    def is_bull(self) -> bool:
        return self.score in (BULL, DOUBLE_BULL)

    @property
    def is_miss(self) -> bool:
        return self.score == 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "multiplier": self.multiplier,
            "is_inner": self.is_inner,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DartOutcome":
        return cls(
            score=int(data["score"]),
            multiplier=int(data.get("multiplier", 1)),
            is_inner=bool(data.get("is_inner", False)),
        )


@dataclass(frozen=True)
class CheckoutStep:
    """A single proposed throw."""
    score: int
    multiplier: int

    @property
    def value(self) -> int:
        return self.score * self.multiplier

    @property
    def label(self) -> str:
        return label_for(self.score, self.multiplier)


@dataclass(frozen=True)
class CheckoutGuide:
    """
    Suggested finishing route.

    When is_setup is True the steps do not finish the game but leave a
    friendlier score for the next turn.
    """
    steps: Tuple[CheckoutStep, ...]
    final_options: Optional[Tuple[CheckoutStep, ...]] = None  # All 1-dart finishes
    is_setup: bool = False

    def __post_init__(self):
        if not 1 <= len(self.steps) <= THROWS_PER_ROUND:
            raise ValueError("Checkout guide needs 1-3 steps")

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(step.label for step in self.steps)


@dataclass(frozen=True)
class ThrowRecord:
    """One entry of the append-only throw history."""
    outcome: DartOutcome
    player_index: int
    round: int
    throw_index: int  # 0, 1, 2

    def __post_init__(self):
        if not 0 <= self.throw_index < THROWS_PER_ROUND:
            raise ValueError(f"throw_index out of range: {self.throw_index}")


@dataclass(frozen=True)
class ToggleRecord:
    """Cricket opponent-closed flip, placed after the first `after_throws` throws."""
    number: int
    after_throws: int

    def __post_init__(self):
        if self.after_throws < 0:
            raise ValueError(f"after_throws must be >= 0: {self.after_throws}")


@dataclass
class BoardGeometry:
    """
    Dartboard radii in normalized units.
    The outer edge of the double ring is 100.
    """
    inner_bull_radius: float = 6.0  # Double bull (50 points)
    outer_bull_radius: float = 15.0  # Single bull (25 points)
    triple_inner_radius: float = 55.0  # Inner edge of triple ring
    triple_outer_radius: float = 65.0  # Outer edge of triple ring
    double_inner_radius: float = 90.0  # Inner edge of double ring
    double_outer_radius: float = 100.0  # Outer edge of double ring (board edge)

    # Sector configuration
    num_sectors: int = 20
    sector_angle: float = 18.0  # Degrees per sector
    sector_sequence: Tuple[int, ...] = (20, 1, 18, 4, 13, 6, 10, 15, 2, 17,
                                        3, 19, 7, 16, 8, 11, 14, 9, 12, 5)

    def __post_init__(self):
        radii = [
            self.inner_bull_radius,
            self.outer_bull_radius,
            self.triple_inner_radius,
            self.triple_outer_radius,
            self.double_inner_radius,
            self.double_outer_radius,
        ]
        if any(r <= 0 for r in radii) or radii != sorted(radii):
            raise ValueError("Board radii must be positive and increasing")
        if len(self.sector_sequence) != self.num_sectors:
            raise ValueError("sector_sequence must list every sector")


@dataclass(frozen=True)
class RoundRecord:
    """Throws of one round plus the running state after it."""
    round: int
    throws: Tuple[DartOutcome, ...] = ()
    score_after: Union[int, Dict[int, int]] = 0  # 01/count_up score or cricket marks

    def to_dict(self) -> Dict[str, Any]:
        score_after = self.score_after
        if isinstance(score_after, dict):
            score_after = dict(score_after)
        return {
            "round": self.round,
            "throws": [t.to_dict() for t in self.throws],
            "score_after": score_after,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoundRecord":
        score_after = data.get("score_after", 0)
        if isinstance(score_after, dict):
            score_after = {int(k): int(v) for k, v in score_after.items()}
        return cls(
            round=int(data["round"]),
            throws=tuple(DartOutcome.from_dict(t) for t in data.get("throws", [])),
            score_after=score_after,
        )


@dataclass(frozen=True)
class GameStats:
    """Derived scoring rates, rounded to two decimals."""
    ppd: Optional[float] = None  # Points per dart
    ppr: Optional[float] = None  # Points per round (3 darts)
    mpr: Optional[float] = None  # Cricket marks per round

    def to_dict(self) -> Dict[str, float]:
        return {k: v for k, v in (("ppd", self.ppd), ("ppr", self.ppr), ("mpr", self.mpr))
                if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameStats":
        return cls(ppd=data.get("ppd"), ppr=data.get("ppr"), mpr=data.get("mpr"))


@dataclass(frozen=True)
class GameRecord:
    """
    Persisted summary of a game.

    Immutable once produced; codecs and stores only ever build new copies.
    """
    id: str
    type: GameType
    date: int  # Milliseconds since the Unix epoch
    winner: str
    final_score: int
    rounds: Tuple[RoundRecord, ...] = field(default_factory=tuple)
    target_score: Optional[int] = None  # Only meaningful for "01"
    stats: Optional[GameStats] = None

    @property
    def total_darts(self) -> int:
        return sum(len(r.throws) for r in self.rounds)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type.value,
            "date": self.date,
            "winner": self.winner,
            "final_score": self.final_score,
            "rounds": [r.to_dict() for r in self.rounds],
        }
        if self.target_score is not None:
            data["target_score"] = self.target_score
        if self.stats is not None:
            data["stats"] = self.stats.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameRecord":
        stats = data.get("stats")
        return cls(
            id=str(data["id"]),
            type=GameType.parse(data["type"]),
            date=int(data["date"]),
            winner=str(data.get("winner", "")),
            final_score=int(data.get("final_score", 0)),
            rounds=tuple(RoundRecord.from_dict(r) for r in data.get("rounds", [])),
            target_score=data.get("target_score"),
            stats=GameStats.from_dict(stats) if stats is not None else None,
        )
