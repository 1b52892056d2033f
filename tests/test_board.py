"""
Unit tests for board module.
"""
import math
import pytest

from dartkeeper.core import BoardGeometry, Config
from dartkeeper.board import ScoreResolver, resolve_score

SLICES = [20, 1, 18, 4, 13, 6, 10, 15, 2, 17, 3, 19, 7, 16, 8, 11, 14, 9, 12, 5]


def _at(radius: float, angle_deg: float):
    """Point at a radius and clockwise angle from 12 o'clock (y down)."""
    rad = math.radians(angle_deg - 90)
    return math.cos(rad) * radius, math.sin(rad) * radius


def test_to_polar():
    """Test coordinate to polar conversion (0° = top, clockwise)."""
    resolver = ScoreResolver()

    radius, angle = resolver.to_polar(0, -100)
    assert radius == pytest.approx(100.0)
    assert min(angle, 360.0 - angle) == pytest.approx(0.0, abs=1e-9)

    radius, angle = resolver.to_polar(100, 0)
    assert angle == pytest.approx(90.0)

    radius, angle = resolver.to_polar(0, 100)
    assert angle == pytest.approx(180.0)

    radius, angle = resolver.to_polar(-100, 0)
    assert angle == pytest.approx(270.0)


def test_angle_to_sector():
    """Test angle to sector mapping."""
    resolver = ScoreResolver()

    # Sector 20: centered at 0°, range [-9°, 9°)
    assert resolver.angle_to_sector(0) == 20
    assert resolver.angle_to_sector(8) == 20
    assert resolver.angle_to_sector(9) == 1
    assert resolver.angle_to_sector(26) == 1
    assert resolver.angle_to_sector(27) == 18
    assert resolver.angle_to_sector(54) == 4

    # Wrapping
    assert resolver.angle_to_sector(351) == 20
    assert resolver.angle_to_sector(359) == 20
    assert resolver.angle_to_sector(350) == 5


def test_radius_to_ring():
    """Test radius to ring mapping."""
    resolver = ScoreResolver()

    assert resolver.radius_to_ring(3.0) == ("inner_bull", 1)
    assert resolver.radius_to_ring(10.0) == ("outer_bull", 1)
    assert resolver.radius_to_ring(40.0) == ("inner_single", 1)
    assert resolver.radius_to_ring(60.0) == ("triple", 3)
    assert resolver.radius_to_ring(75.0) == ("outer_single", 1)
    assert resolver.radius_to_ring(95.0) == ("double", 2)
    assert resolver.radius_to_ring(120.0) == ("miss", 1)


def test_bulls():
    """Everything within 6.0 is an inner bull, up to 15.0 an outer bull."""
    resolver = ScoreResolver()

    for angle in range(0, 360, 30):
        for radius in (0.0, 2.5, 5.9):
            hit = resolver.resolve(*_at(radius, angle))
            assert (hit.score, hit.multiplier, hit.label) == (50, 1, "D-Bull")

        hit = resolver.resolve(*_at(12.0, angle))
        assert (hit.score, hit.multiplier, hit.label) == (25, 1, "S-Bull")

    assert resolver.resolve(15, 0).score == 25
    assert resolver.resolve(0.1, 0.1).score == 50


def test_miss():
    """Anything beyond the double ring is a miss."""
    resolver = ScoreResolver()

    for point in [(101, 0), (-95, -95), (1000, 1000), _at(100.5, 123)]:
        hit = resolver.resolve(*point)
        assert (hit.score, hit.multiplier, hit.label) == (0, 1, "Miss")


def test_twenty_segment():
    """Test rings along the 20 segment at the top."""
    resolver = ScoreResolver()

    hit = resolver.resolve(0, -95)
    assert (hit.score, hit.multiplier, hit.label) == (20, 2, "D20")

    hit = resolver.resolve(0, -60)
    assert (hit.score, hit.multiplier, hit.label) == (20, 3, "T20")

    hit = resolver.resolve(0, -40)
    assert (hit.score, hit.multiplier, hit.label) == (20, 1, "S20")
    assert hit.is_inner

    hit = resolver.resolve(0, -70)
    assert hit.label == "S20"
    assert not hit.is_inner


def test_clock_positions():
    """3, 6 and 9 o'clock land on 6, 3 and 11."""
    resolver = ScoreResolver()

    assert resolver.resolve(95, 0).label == "D6"
    assert resolver.resolve(0, 95).label == "D3"
    assert resolver.resolve(-95, 0).label == "D11"
    assert resolver.resolve(60, 0).label == "T6"
    assert resolver.resolve(40, 0).label == "S6"


def test_all_slice_centers():
    """Slice centers in the double band follow the board order clockwise."""
    resolver = ScoreResolver()

    for i, expected in enumerate(SLICES):
        angle = math.radians(-90 + i * 18)
        hit = resolver.resolve(math.cos(angle) * 95, math.sin(angle) * 95)
        assert hit.score == expected
        assert hit.multiplier == 2


def test_ring_boundaries_are_inclusive():
    """Band edges belong to the band checked first."""
    resolver = ScoreResolver()

    assert resolver.resolve(6, 0).score == 50
    assert resolver.resolve(55, 0).multiplier == 3
    assert resolver.resolve(65, 0).multiplier == 3
    assert resolver.resolve(66, 0).multiplier == 1
    assert resolver.resolve(90, 0).multiplier == 2
    assert resolver.resolve(100, 0).multiplier == 2
    assert resolver.resolve(101, 0).score == 0


def test_near_slice_boundary():
    """A point just right of top stays within the neighbours of 20."""
    hit = resolve_score(1, -95)
    assert hit.score in (1, 5, 20)


def test_custom_geometry_from_config():
    """Board radii can be overridden through config."""
    config = Config.from_dict({"board": {"triple_inner_radius": 50.0}})
    resolver = ScoreResolver.from_config(config)

    assert resolver.resolve(0, -52).label == "T20"
    assert ScoreResolver().resolve(0, -52).label == "S20"


def test_is_on_board():
    """Test board edge check."""
    resolver = ScoreResolver(BoardGeometry())

    assert resolver.is_on_board(0, 0)
    assert resolver.is_on_board(0, -100)
    assert not resolver.is_on_board(80, 80)


def test_boundaries():
    """Test ring and sector boundary listings."""
    resolver = ScoreResolver()

    rings = resolver.ring_boundaries()
    assert rings["inner_bull"] < rings["outer_bull"] < rings["triple_inner"]
    assert rings["double_outer"] == 100.0

    sectors = resolver.sector_boundaries()
    assert len(sectors) == 20
    assert sectors[0] == (20, 351.0, 9.0)


if __name__ == "__main__":
    print("Running board module tests...")
    test_to_polar()
    test_angle_to_sector()
    test_radius_to_ring()
    test_bulls()
    test_miss()
    test_twenty_segment()
    test_clock_positions()
    test_all_slice_centers()
    test_ring_boundaries_are_inclusive()
    print("\n✓ All board tests passed!")
