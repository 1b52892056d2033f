"""
Game state management.

GameStateMachine owns one active game: round/throw position, the ruleset
state, bust and game-over flags, and the append-only throw history. Undo
rebuilds everything by replaying that history from a fresh game.
"""
import time
from typing import Dict, Iterable, List, Optional, Union
import logging

from dartkeeper.core import (
    Config,
    CheckoutGuide,
    DartOutcome,
    GameRecord,
    GameType,
    RoundRecord,
    ThrowRecord,
    ToggleRecord,
    CRICKET_NUMBERS,
    THROWS_PER_ROUND,
)
from .checkout import CheckoutSolver
from .rules import CricketState, X01State, get_game_mode, score_rounds
from .stats import compute_stats

logger = logging.getLogger(__name__)

PLAYER_ONE = "Player 1"
VALID_SCORES = frozenset(list(range(0, 21)) + [25, 50])


class GameStateMachine:
    """
    Turn-based state machine for a single local game.

    Lifecycle: init_game() → record_throw() x3 → next_round() → ... → game over.
    A bust in 01 ends the turn immediately and moves on to the next round.
    Calls that make no sense in the current state (a fourth dart, throws
    after the game is over) are ignored and return False.
    """

    def __init__(
            self,
            game_type: Union[GameType, str, None] = None,
            target_score: Optional[int] = None,
            config: Optional[Config] = None,
            checkout_solver: Optional[CheckoutSolver] = None
    ):
        """
        Initialize and start a game.

        Args:
            game_type: Ruleset (default from config, normally "01")
            target_score: 01 starting score (default from config)
            config: Engine configuration
            checkout_solver: Solver used for checkout hints
        """
        self.config = config or Config()
        self.checkout_solver = checkout_solver or CheckoutSolver.from_config(self.config)

        self.init_game(
            game_type or self.config.get("game", "default_type", "01"),
            target_score,
        )

    def init_game(self, game_type: Union[GameType, str], target_score: Optional[int] = None) -> None:
        """
        Reset to the canonical start state of a ruleset.

        Args:
            game_type: "01", "cricket" or "count_up"
            target_score: Starting score for 01
        """
        self.game_type = GameType.parse(game_type)
        if target_score is None:
            target_score = self.config.get("game", "default_target_score", 301)
        self.target_score = target_score
        self.mode = get_game_mode(self.game_type)
        self.state = self.mode.initial_state(target_score)

        self.current_round = 1
        self.current_throw = 0
        self.current_player_index = 0
        self.current_turn_throws: List[DartOutcome] = []
        self.throw_history: List[ThrowRecord] = []
        self.toggle_history: List[ToggleRecord] = []

        self.is_game_over = False
        self.winner = ""
        self.waiting_for_next_round = False
        self.is_bust = False

        logger.info(f"Game started: {self.mode.get_name()} (target={self.target_score})")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def record_throw(self, outcome: DartOutcome) -> bool:
        """
        Record one dart for the current player.

        Args:
            outcome: Resolved dart

        Returns:
            True if the throw was recorded, False if it was ignored
        """
        if self.is_game_over or self.waiting_for_next_round or self.current_throw >= THROWS_PER_ROUND:
            logger.debug(f"Ignoring throw {outcome.label}: turn closed")
            return False

        assert outcome.score in VALID_SCORES, f"Invalid score: {outcome.score}"
        assert outcome.multiplier in (1, 2, 3), f"Invalid multiplier: {outcome.multiplier}"

        self.is_bust = False
        self.throw_history.append(ThrowRecord(
            outcome=outcome,
            player_index=self.current_player_index,
            round=self.current_round,
            throw_index=self.current_throw,
        ))
        self.current_turn_throws.append(outcome)

        self._process_throw(outcome)
        return True

    def next_round(self) -> None:
        """Advance to the next round after a completed turn."""
        self._advance_round()

    def undo(self) -> bool:
        """
        Remove the most recent throw.

        The state is rebuilt by replaying the remaining history into a fresh
        machine, which is adopted only once the replay is complete. Opponent
        toggles made after the removed throw are kept, at the end of the
        shortened history.

        Returns:
            True if a throw was removed, False if history was empty
        """
        if not self.throw_history:
            return False

        last = self.throw_history[-1]
        remaining = self.throw_history[:-1]
        toggles = [
            ToggleRecord(t.number, min(t.after_throws, len(remaining)))
            for t in self.toggle_history
        ]

        rebuilt = self.replay(
            self.game_type,
            self.target_score,
            remaining,
            config=self.config,
            checkout_solver=self.checkout_solver,
            toggles=toggles,
        )

        # Removing the first dart of a round leaves the replay parked at
        # the end of the previous round
        if rebuilt.current_round < last.round:
            rebuilt._advance_round()

        vars(self).update(vars(rebuilt))
        logger.info(f"Undone: {last.outcome.label} (round {last.round})")
        return True

    def toggle_opponent_closed(self, number: int) -> bool:
        """
        Flip the opponent-closed flag of a cricket number.

        Returns:
            True if a flag changed
        """
        if self.game_type is not GameType.CRICKET or number not in CRICKET_NUMBERS:
            return False

        self.toggle_history.append(ToggleRecord(number, len(self.throw_history)))
        self._apply_toggle(number)
        return True

    # ------------------------------------------------------------------
    # Replay
    # ------------------------------------------------------------------

    @classmethod
    def replay(
            cls,
            game_type: Union[GameType, str],
            target_score: Optional[int],
            history: Iterable[ThrowRecord],
            config: Optional[Config] = None,
            checkout_solver: Optional[CheckoutSolver] = None,
            toggles: Iterable[ToggleRecord] = ()
    ) -> "GameStateMachine":
        """
        Fold a throw history into a fresh game.

        Works with any prefix of a recorded history, so it doubles as a
        time-travel view of a running game. Opponent toggles are applied
        between the throws they were made between, so each dart is scored
        under the flags that held when it landed.

        Args:
            game_type: Ruleset
            target_score: 01 starting score
            history: Throw records in the order they were made
            config: Engine configuration
            checkout_solver: Solver for the rebuilt machine
            toggles: Cricket opponent toggles in the order they were made

        Returns:
            New GameStateMachine positioned after the last record
        """
        machine = cls(game_type, target_score, config=config, checkout_solver=checkout_solver)
        history = list(history)
        pending = sorted(toggles, key=lambda t: t.after_throws)

        for count, record in enumerate(history):
            while pending and pending[0].after_throws <= count:
                machine.toggle_opponent_closed(pending.pop(0).number)
            if machine.is_game_over:
                break
            while machine.current_round < record.round and not machine.is_game_over:
                machine._advance_round()
            machine.current_player_index = record.player_index
            machine.is_bust = False
            machine._process_throw(record.outcome)
            machine.throw_history.append(record)

        for toggle in pending:
            machine.toggle_opponent_closed(toggle.number)

        machine.throw_history = history
        machine.current_turn_throws = [
            t.outcome for t in sorted(
                (t for t in history if t.round == machine.current_round),
                key=lambda t: t.throw_index,
            )
        ]
        return machine

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _process_throw(self, outcome: DartOutcome) -> None:
        """Run the ruleset reducer and move the turn position on."""
        result = self.mode.apply_throw(self.state, outcome)
        self.state = result.state

        if result.bust:
            self.is_bust = True
            logger.info(f"BUST! ({outcome.label}) Score back to {self.state.remaining}")
            self._advance_round(bust=True)
            return

        if result.finished:
            self.is_game_over = True
            self.winner = PLAYER_ONE
            logger.info(f"Game finished! Winner: {self.winner} (round {self.current_round})")

        self.current_throw += 1
        if self.current_throw >= THROWS_PER_ROUND:
            self.waiting_for_next_round = True

        logger.debug(f"Throw {outcome.label}: {self.mode.score_after(self.state)}")

    def _apply_toggle(self, number: int) -> None:
        self.state = self.mode.toggle_opponent_closed(self.state, number)
        logger.debug(f"Opponent closed {number}: {self.state.opponent_closed[number]}")

    def _advance_round(self, bust: bool = False) -> None:
        if self.is_game_over:
            return

        self.waiting_for_next_round = False
        self.current_round += 1
        self.current_throw = 0
        self.current_turn_throws = []
        self.state = self.mode.start_round(self.state, bust)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def score_01(self) -> Optional[int]:
        """Remaining score (01 only)."""
        if isinstance(self.state, X01State):
            return self.state.remaining
        return None

    @property
    def round_start_score(self) -> Optional[int]:
        if isinstance(self.state, X01State):
            return self.state.round_start
        return None

    @property
    def cricket_marks(self) -> Dict[int, int]:
        if isinstance(self.state, CricketState):
            return dict(self.state.marks)
        return {}

    @property
    def cricket_points(self) -> int:
        if isinstance(self.state, CricketState):
            return self.state.points
        return 0

    @property
    def opponent_closed(self) -> Dict[int, bool]:
        if isinstance(self.state, CricketState):
            return dict(self.state.opponent_closed)
        return {}

    @property
    def darts_left(self) -> int:
        return max(THROWS_PER_ROUND - self.current_throw, 0)

    def checkout_guide(self) -> Optional[CheckoutGuide]:
        """Finishing hint for the darts left this turn (01 only)."""
        if self.score_01 is None or self.is_game_over or self.waiting_for_next_round:
            return None
        return self.checkout_solver.solve(self.score_01, self.darts_left)

    def to_record(
            self,
            record_id: Optional[str] = None,
            date: Optional[int] = None,
            winner: Optional[str] = None
    ) -> GameRecord:
        """
        Snapshot the game as an immutable GameRecord.

        Args:
            record_id: Identifier (default: "game-<date>")
            date: Milliseconds since epoch (default: now)
            winner: Result string (default: "Win", "Finish" or "Lose")

        Returns:
            GameRecord with rounds, per-round scores and stats
        """
        if date is None:
            date = int(time.time() * 1000)
        if record_id is None:
            record_id = f"game-{date}"
        if winner is None:
            if self.is_game_over:
                winner = "Win"
            elif self.game_type is GameType.COUNT_UP:
                winner = "Finish"
            else:
                winner = "Lose"

        grouped: Dict[int, List[DartOutcome]] = {}
        for record in self.throw_history:
            grouped.setdefault(record.round, []).append(record.outcome)
        round_throws = [grouped[r] for r in sorted(grouped)]

        target = self.target_score if self.game_type is GameType.X01 else None
        snapshots = score_rounds(self.game_type, round_throws, target)
        final_score = self.mode.final_score(self.state)

        rounds = tuple(
            RoundRecord(round=index + 1, throws=tuple(throws), score_after=snapshot)
            for index, (throws, snapshot) in enumerate(zip(round_throws, snapshots))
        )

        return GameRecord(
            id=record_id,
            type=self.game_type,
            date=date,
            winner=winner,
            final_score=final_score,
            rounds=rounds,
            target_score=target,
            stats=compute_stats(self.game_type, round_throws, final_score, target),
        )
