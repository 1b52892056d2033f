"""
Checkout route search.

Open-out rules: any single, double or triple may finish. The search is a
bounded greedy walk (depth <= 3) over a fixed throw universe; the first
valid route wins, so results are deterministic rather than optimal.
"""
from typing import List, Optional, Sequence, Tuple
import logging

from dartkeeper.core import CheckoutGuide, CheckoutStep, BULL, THROWS_PER_ROUND

logger = logging.getLogger(__name__)

MAX_CHECKOUT = 180
ONE_DART_MAX = 60  # Highest score a single dart can take out (T20)
PREFERRED_LEAVES: Tuple[int, ...] = (32, 40, 24, 36, 16, 20)

DOUBLES: Tuple[CheckoutStep, ...] = tuple(
    CheckoutStep(s, 2) for s in range(1, 21)) + (CheckoutStep(BULL, 2),)
TRIPLES: Tuple[CheckoutStep, ...] = tuple(CheckoutStep(s, 3) for s in range(1, 21))
SINGLES: Tuple[CheckoutStep, ...] = tuple(
    CheckoutStep(s, 1) for s in range(1, 21)) + (CheckoutStep(BULL, 1),)

# Enumeration order matters: it decides which match is "first"
ALL_THROWS: Tuple[CheckoutStep, ...] = DOUBLES + TRIPLES + SINGLES
BY_VALUE_DESC: Tuple[CheckoutStep, ...] = tuple(
    sorted(ALL_THROWS, key=lambda step: -step.value))
SETUP_CANDIDATES: Tuple[CheckoutStep, ...] = SINGLES + TRIPLES + DOUBLES


def _find_throw(value: int, throws: Sequence[CheckoutStep] = ALL_THROWS) -> Optional[CheckoutStep]:
    """First throw in enumeration order worth exactly value."""
    for step in throws:
        if step.value == value:
            return step
    return None


class CheckoutSolver:
    """
    Finds a finishing route for a remaining score.

    Search order, first match wins:
        1. every 1-dart finish (reported through final_options)
        2. highest-first 2-dart finish
        3. highest-first 3-dart finish
        4. with one dart left, a setup shot towards a preferred leave
    """

    def __init__(self, preferred_leaves: Optional[Sequence[int]] = None):
        self.preferred_leaves: Tuple[int, ...] = tuple(
            preferred_leaves if preferred_leaves is not None else PREFERRED_LEAVES)

    @classmethod
    def from_config(cls, config) -> "CheckoutSolver":
        return cls(config.get("checkout", "preferred_leaves", PREFERRED_LEAVES))

    def solve(self, score: int, darts_remaining: int) -> Optional[CheckoutGuide]:
        """
        Suggest a checkout route.

        Args:
            score: Remaining score
            darts_remaining: Darts left in the turn (1-3)

        Returns:
            CheckoutGuide, or None for invalid input or when nothing fits
        """
        if score < 1 or score > MAX_CHECKOUT or darts_remaining < 1:
            return None

        guide = (
            self._one_dart(score)
            or (darts_remaining >= 2 and self._two_darts(score))
            or (darts_remaining >= 3 and self._three_darts(score))
            or (darts_remaining == 1 and self._setup_shot(score))
            or None
        )

        if guide is None:
            logger.debug(f"No checkout for {score} with {darts_remaining} dart(s)")
        else:
            logger.debug(
                f"Checkout {score}/{darts_remaining}: {' '.join(guide.labels)}"
                f"{' (setup)' if guide.is_setup else ''}"
            )
        return guide

    def _one_dart(self, score: int) -> Optional[CheckoutGuide]:
        options = tuple(step for step in ALL_THROWS if step.value == score)
        if not options:
            return None
        return CheckoutGuide(steps=(options[0],), final_options=options, is_setup=False)

    def _two_darts(self, score: int) -> Optional[CheckoutGuide]:
        for first in BY_VALUE_DESC:
            remainder = score - first.value
            if remainder < 1:
                continue
            second = _find_throw(remainder)
            if second:
                return CheckoutGuide(steps=(first, second))
        return None

    def _three_darts(self, score: int) -> Optional[CheckoutGuide]:
        for first in BY_VALUE_DESC:
            rem1 = score - first.value
            if rem1 < 1:
                continue
            for second in BY_VALUE_DESC:
                rem2 = rem1 - second.value
                if rem2 < 1:
                    continue
                third = _find_throw(rem2)
                if third:
                    return CheckoutGuide(steps=(first, second, third))
        return None

    def _setup_shot(self, score: int) -> Optional[CheckoutGuide]:
        for leave in self.preferred_leaves:
            needed = score - leave
            if needed <= 0:
                continue
            shot = _find_throw(needed, SETUP_CANDIDATES)
            if shot:
                return CheckoutGuide(steps=(shot,), is_setup=True)

        # Any leave a single dart can finish next turn
        for shot in SETUP_CANDIDATES:
            if 0 < score - shot.value <= ONE_DART_MAX:
                return CheckoutGuide(steps=(shot,), is_setup=True)

        return None


_default_solver = CheckoutSolver()


def get_checkout_guide(score: int, darts_remaining: int = THROWS_PER_ROUND) -> Optional[CheckoutGuide]:
    """Solve with the standard preferred leaves."""
    return _default_solver.solve(score, darts_remaining)


def list_checkout_labels(score: int, darts_remaining: int = THROWS_PER_ROUND) -> List[str]:
    """Labels of the suggested route, e.g. ['T20', 'T20', 'D20']."""
    guide = get_checkout_guide(score, darts_remaining)
    return list(guide.labels) if guide else []
