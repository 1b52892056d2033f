"""
Game modes (01, Cricket, Count-Up) with rule implementations.

Each mode is a stateless reducer: apply_throw() takes the current ruleset
state and a dart and returns the next state. The live game session and the
share-string decoder both run throws through these same functions.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Union

from dartkeeper.core import (
    DartOutcome,
    GameType,
    BULL,
    DOUBLE_BULL,
    CRICKET_NUMBERS,
)

CLOSED_MARKS = 3


def effective_points(outcome: DartOutcome) -> int:
    """Points for 01/count-up: any bull counts 50 (soft-tip "fat bull")."""
    if outcome.is_bull:
        return DOUBLE_BULL
    return outcome.value


def cricket_hits(outcome: DartOutcome):
    """
    Normalize a dart to (cricket target, hits).

    Outer bull hits 25 with its multiplier, the inner bull counts two hits.
    """
    if outcome.score == DOUBLE_BULL:
        return BULL, 2
    return outcome.score, outcome.multiplier


@dataclass(frozen=True)
class X01State:
    remaining: int
    round_start: int  # Score a bust reverts to


@dataclass(frozen=True)
class CricketState:
    marks: Dict[int, int] = field(default_factory=lambda: {n: 0 for n in CRICKET_NUMBERS})
    opponent_closed: Dict[int, bool] = field(
        default_factory=lambda: {n: False for n in CRICKET_NUMBERS})
    points: int = 0


@dataclass(frozen=True)
class CountUpState:
    total: int = 0


@dataclass(frozen=True)
class ThrowResult:
    """Next ruleset state plus the events the throw triggered."""
    state: Any
    bust: bool = False
    finished: bool = False


class GameMode(ABC):
    """Abstract base class for game modes."""

    game_type: GameType

    @abstractmethod
    def get_name(self) -> str:
        """Get game mode name."""
        pass

    @abstractmethod
    def initial_state(self, target_score: Optional[int] = None) -> Any:
        """Fresh ruleset state for a new game."""
        pass

    @abstractmethod
    def apply_throw(self, state: Any, outcome: DartOutcome) -> ThrowResult:
        """
        Apply one dart.

        Args:
            state: Current ruleset state (never mutated)
            outcome: Resolved dart

        Returns:
            ThrowResult with the new state and bust/finish flags
        """
        pass

    @abstractmethod
    def check_winner(self, state: Any) -> bool:
        """Check if the state is a won game."""
        pass

    @abstractmethod
    def score_after(self, state: Any) -> Union[int, Dict[int, int]]:
        """Per-round snapshot stored in RoundRecord.score_after."""
        pass

    @abstractmethod
    def final_score(self, state: Any) -> int:
        """Score reported in GameRecord.final_score."""
        pass

    def start_round(self, state: Any, bust: bool = False) -> Any:
        """Hook run when a new round begins."""
        return state

    def points_for(self, outcome: DartOutcome) -> int:
        return effective_points(outcome)

    def marks_for(self, outcome: DartOutcome) -> int:
        return 0


class Mode01(GameMode):
    """
    01 game mode (301, 501, ...).

    Rules:
    - Subtract each dart from the remaining score, any bull counts 50
    - Reaching exactly 0 wins (open out, no double required)
    - Going below 0 is a bust: score reverts to the round start
      and the turn ends
    """

    game_type = GameType.X01

    def get_name(self) -> str:
        return "01"

    def initial_state(self, target_score: Optional[int] = None) -> X01State:
        target = target_score if target_score is not None else 301
        return X01State(remaining=target, round_start=target)

    def apply_throw(self, state: X01State, outcome: DartOutcome) -> ThrowResult:
        new_score = state.remaining - self.points_for(outcome)

        if new_score == 0:
            return ThrowResult(replace(state, remaining=0), finished=True)

        if new_score < 0:
            return ThrowResult(replace(state, remaining=state.round_start), bust=True)

        return ThrowResult(replace(state, remaining=new_score))

    def start_round(self, state: X01State, bust: bool = False) -> X01State:
        # A bust already reverted to the baseline
        if bust:
            return state
        return replace(state, round_start=state.remaining)

    def check_winner(self, state: X01State) -> bool:
        return state.remaining == 0

    def score_after(self, state: X01State) -> int:
        return state.remaining

    def final_score(self, state: X01State) -> int:
        return state.remaining


class ModeCricket(GameMode):
    """
    Cricket game mode.

    Rules:
    - Close 15-20 and Bull with 3 marks each
    - Extra marks on a closed number score its value,
      unless the opponent has closed it as well
    - Closing all seven numbers ends the game
    """

    game_type = GameType.CRICKET

    def get_name(self) -> str:
        return "Cricket"

    def initial_state(self, target_score: Optional[int] = None) -> CricketState:
        return CricketState()

    def apply_throw(self, state: CricketState, outcome: DartOutcome) -> ThrowResult:
        target, hits = cricket_hits(outcome)

        if target not in state.marks:
            return ThrowResult(state, finished=self.check_winner(state))

        marks = dict(state.marks)
        points = state.points

        current = marks[target]
        if current < CLOSED_MARKS:
            used = min(hits, CLOSED_MARKS - current)
            marks[target] = current + used
            hits -= used

        if hits > 0 and not state.opponent_closed.get(target, False):
            points += hits * target

        new_state = replace(state, marks=marks, points=points)
        return ThrowResult(new_state, finished=self.check_winner(new_state))

    def toggle_opponent_closed(self, state: CricketState, number: int) -> CricketState:
        """Flip the opponent flag of one number; marks are untouched."""
        if number not in state.opponent_closed:
            return state
        flags = dict(state.opponent_closed)
        flags[number] = not flags[number]
        return replace(state, opponent_closed=flags)

    def check_winner(self, state: CricketState) -> bool:
        return all(state.marks.get(n, 0) >= CLOSED_MARKS for n in CRICKET_NUMBERS)

    def score_after(self, state: CricketState) -> Dict[int, int]:
        return dict(state.marks)

    def final_score(self, state: CricketState) -> int:
        return state.points

    def marks_for(self, outcome: DartOutcome) -> int:
        target, hits = cricket_hits(outcome)
        return hits if target in CRICKET_NUMBERS else 0


class ModeCountUp(GameMode):
    """
    Count-Up mode - add every dart to a running total.

    Used for practice records; there is no winning condition.
    """

    game_type = GameType.COUNT_UP

    def get_name(self) -> str:
        return "Count-Up"

    def initial_state(self, target_score: Optional[int] = None) -> CountUpState:
        return CountUpState()

    def apply_throw(self, state: CountUpState, outcome: DartOutcome) -> ThrowResult:
        return ThrowResult(replace(state, total=state.total + self.points_for(outcome)))

    def check_winner(self, state: CountUpState) -> bool:
        return False

    def score_after(self, state: CountUpState) -> int:
        return state.total

    def final_score(self, state: CountUpState) -> int:
        return state.total


GAME_MODES: Dict[GameType, GameMode] = {
    GameType.X01: Mode01(),
    GameType.CRICKET: ModeCricket(),
    GameType.COUNT_UP: ModeCountUp(),
}


def get_game_mode(game_type: Union[GameType, str]) -> GameMode:
    """Look up the reducer set for a ruleset."""
    return GAME_MODES[GameType.parse(game_type)]


def score_rounds(
        game_type: Union[GameType, str],
        rounds: Sequence[Sequence[DartOutcome]],
        target_score: Optional[int] = None
) -> List[Union[int, Dict[int, int]]]:
    """
    Replay raw rounds and return the score_after of each one.

    A bust or a finish ends the round; any throws recorded after it
    in the same round are not scored.
    """
    mode = get_game_mode(game_type)
    state = mode.initial_state(target_score)
    snapshots = []
    bust = False

    for index, throws in enumerate(rounds):
        if index > 0:
            state = mode.start_round(state, bust)
        bust = False

        for outcome in throws:
            result = mode.apply_throw(state, outcome)
            state = result.state
            if result.bust or result.finished:
                bust = result.bust
                break

        snapshots.append(mode.score_after(state))

    return snapshots
