"""
Dartboard geometry calculations and sector mapping.
"""
import numpy as np
from typing import Dict, List, Optional, Tuple
import logging

from dartkeeper.core import BoardGeometry, DartOutcome, BULL, DOUBLE_BULL

logger = logging.getLogger(__name__)


class ScoreResolver:
    """
    Maps board coordinates to dart outcomes.

    Coordinates are relative to the board center in normalized units
    (outer edge of the double ring = 100) with x pointing right and y
    pointing down, as delivered by the input surface.
    """

    def __init__(self, board_geometry: Optional[BoardGeometry] = None):
        """
        Initialize score resolver.

        Args:
            board_geometry: Board radii (default: BoardGeometry())
        """
        self.geometry = board_geometry or BoardGeometry()
        logger.debug(f"ScoreResolver initialized: {self.geometry}")

    @classmethod
    def from_config(cls, config) -> "ScoreResolver":
        """Build a resolver from the 'board' config section."""
        return cls(BoardGeometry(**config.get_section("board")))

    def to_polar(self, x: float, y: float) -> Tuple[float, float]:
        """
        Convert board coordinates to polar coordinates.

        Returns:
            (radius, angle) where angle is in degrees, 0° = top, clockwise
        """
        radius = np.sqrt(x ** 2 + y ** 2)

        # atan2 puts 0° at 3 o'clock; with y down, 12 o'clock is -90°
        angle = np.arctan2(y, x) * 180.0 / np.pi + 90.0
        if angle < 0:
            angle += 360.0
        if angle >= 360.0:
            angle -= 360.0

        return float(radius), float(angle)

    def angle_to_sector(self, angle: float) -> int:
        """
        Convert angle to sector number.

        Args:
            angle: Angle in degrees (0° = top, clockwise)

        Returns:
            Sector number (1-20)
        """
        # Sector 20 is centered at 0°, spanning [-9°, 9°)
        half_sector = self.geometry.sector_angle / 2
        adjusted_angle = (angle + half_sector) % 360
        sector_idx = int(adjusted_angle // self.geometry.sector_angle)
        sector_idx = min(sector_idx, self.geometry.num_sectors - 1)
        return self.geometry.sector_sequence[sector_idx]

    def radius_to_ring(self, radius: float) -> Tuple[str, int]:
        """
        Convert radius to ring name and multiplier.

        Bands are closed on their inner edge; bulls are checked first, then
        the board edge, then triple before double.

        Returns:
            (ring_name, multiplier) where ring_name is one of
            "inner_bull", "outer_bull", "triple", "double",
            "inner_single", "outer_single", "miss"
        """
        g = self.geometry

        if radius <= g.inner_bull_radius:
            return "inner_bull", 1

        if radius <= g.outer_bull_radius:
            return "outer_bull", 1

        if radius > g.double_outer_radius:
            return "miss", 1

        if g.triple_inner_radius <= radius <= g.triple_outer_radius:
            return "triple", 3

        if g.double_inner_radius <= radius <= g.double_outer_radius:
            return "double", 2

        if radius < g.triple_inner_radius:
            return "inner_single", 1

        return "outer_single", 1

    def resolve(self, x: float, y: float) -> DartOutcome:
        """
        Classify a landing position.

        Every coordinate classifies; points off the board are a miss.

        Args:
            x: X offset from board center
            y: Y offset from board center (positive = down)

        Returns:
            DartOutcome with score, multiplier and inner flag
        """
        radius, angle = self.to_polar(x, y)
        ring_name, multiplier = self.radius_to_ring(radius)

        if ring_name == "inner_bull":
            outcome = DartOutcome(score=DOUBLE_BULL, multiplier=1)
        elif ring_name == "outer_bull":
            outcome = DartOutcome(score=BULL, multiplier=1)
        elif ring_name == "miss":
            outcome = DartOutcome(score=0, multiplier=1)
        else:
            outcome = DartOutcome(
                score=self.angle_to_sector(angle),
                multiplier=multiplier,
                is_inner=ring_name == "inner_single",
            )

        logger.debug(
            f"Score: ({x:.1f}, {y:.1f}) → r={radius:.1f}, θ={angle:.1f}° → "
            f"{ring_name} = {outcome.label}"
        )

        return outcome

    def is_on_board(self, x: float, y: float) -> bool:
        """Check if coordinates are inside the double ring's outer edge."""
        radius, _ = self.to_polar(x, y)
        return radius <= self.geometry.double_outer_radius

    def ring_boundaries(self) -> Dict[str, float]:
        """All ring radii, innermost first."""
        g = self.geometry
        return {
            "inner_bull": g.inner_bull_radius,
            "outer_bull": g.outer_bull_radius,
            "triple_inner": g.triple_inner_radius,
            "triple_outer": g.triple_outer_radius,
            "double_inner": g.double_inner_radius,
            "double_outer": g.double_outer_radius,
        }

    def sector_boundaries(self) -> List[Tuple[int, float, float]]:
        """
        Get sector boundary angles.

        Returns:
            List of (sector_number, start_angle, end_angle) tuples
        """
        boundaries = []
        half_sector = self.geometry.sector_angle / 2

        for i, sector_num in enumerate(self.geometry.sector_sequence):
            center_angle = i * self.geometry.sector_angle
            start_angle = (center_angle - half_sector) % 360
            end_angle = (center_angle + half_sector) % 360
            boundaries.append((sector_num, start_angle, end_angle))

        return boundaries


_default_resolver = ScoreResolver()


def resolve_score(x: float, y: float) -> DartOutcome:
    """Resolve coordinates with the standard board geometry."""
    return _default_resolver.resolve(x, y)
