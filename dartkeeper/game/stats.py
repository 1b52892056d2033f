"""
Scoring-rate statistics (PPD, PPR, MPR).
"""
from typing import Optional, Sequence, Union

from dartkeeper.core import DartOutcome, GameStats, GameType, THROWS_PER_ROUND
from .rules import get_game_mode


def _rate(numerator: float, denominator: float) -> float:
    return round(numerator / denominator, 2)


def compute_stats(
        game_type: Union[GameType, str],
        rounds: Sequence[Sequence[DartOutcome]],
        final_score: int,
        target_score: Optional[int] = None
) -> GameStats:
    """
    Derive per-game averages from the raw throws.

    01 uses the points actually taken off (target - final), so busted darts
    count as zero. Count-up uses its final total. Cricket counts every hit on
    a cricket number, closing marks and scoring marks alike.

    Args:
        game_type: Ruleset of the game
        rounds: Throws grouped by round
        final_score: GameRecord.final_score
        target_score: 01 starting score (stats are skipped without it)

    Returns:
        GameStats with only the fields that apply to the ruleset
    """
    game_type = GameType.parse(game_type)
    total_darts = sum(len(throws) for throws in rounds)

    if total_darts == 0:
        return GameStats()

    if game_type is GameType.CRICKET:
        mode = get_game_mode(game_type)
        total_marks = sum(mode.marks_for(t) for throws in rounds for t in throws)
        return GameStats(mpr=_rate(total_marks, total_darts / THROWS_PER_ROUND))

    if game_type is GameType.X01:
        if not target_score:
            return GameStats()
        points = target_score - final_score
    else:
        points = final_score

    ppd = _rate(points, total_darts)
    return GameStats(ppd=ppd, ppr=round(ppd * THROWS_PER_ROUND, 2))
