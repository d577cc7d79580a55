"""
Unit tests for the leveling curve.

Tests per-level cost, cumulative thresholds, level lookup and progress.
"""

import pytest

from alchemy.modules.shared.constants import MAX_PLAYER_LEVEL
from alchemy.modules.shared.exceptions import ValidationError
from alchemy.modules.shared.formulas import (
    calculate_level_from_total_xp,
    calculate_level_progress,
    calculate_total_xp_for_level,
    calculate_xp_for_level,
)


@pytest.mark.unit
class TestXpForLevel:
    """Test the cost of each level step."""

    def test_level_one_costs_nothing(self):
        """Level 1 is the starting level."""
        assert calculate_xp_for_level(1) == 0

    def test_level_two_cost(self):
        """Level 2 should cost floor(100 * 2^1.5)."""
        assert calculate_xp_for_level(2) == 282

    def test_level_three_cost(self):
        """Level 3 should cost floor(100 * 3^1.5)."""
        assert calculate_xp_for_level(3) == 519


@pytest.mark.unit
class TestCumulativeXp:
    """Test the cumulative XP table."""

    def test_known_thresholds(self):
        """Reaching levels 1, 2 and 3 needs 0, 282 and 801 total XP."""
        assert calculate_total_xp_for_level(1) == 0
        assert calculate_total_xp_for_level(2) == 282
        assert calculate_total_xp_for_level(3) == 801

    def test_out_of_range_level_rejected(self):
        """Levels outside 1..max raise ValidationError."""
        with pytest.raises(ValidationError):
            calculate_total_xp_for_level(0)
        with pytest.raises(ValidationError):
            calculate_total_xp_for_level(MAX_PLAYER_LEVEL + 1)


@pytest.mark.unit
class TestLevelFromTotalXp:
    """Test level lookup from accumulated XP."""

    @pytest.mark.parametrize(
        "total_xp,expected_level",
        [(0, 1), (281, 1), (282, 2), (800, 2), (801, 3), (900, 3)],
    )
    def test_level_boundaries(self, total_xp, expected_level):
        """Thresholds are inclusive: exactly enough XP reaches the level."""
        assert calculate_level_from_total_xp(total_xp) == expected_level

    def test_level_is_monotonic(self):
        """More XP never yields a lower level."""
        # Arrange
        samples = range(0, 50_000, 137)

        # Act
        levels = [calculate_level_from_total_xp(xp) for xp in samples]

        # Assert
        assert levels == sorted(levels)

    def test_level_capped_at_max(self):
        """Absurd XP totals stop at the max level."""
        assert calculate_level_from_total_xp(10**12) == MAX_PLAYER_LEVEL

    def test_negative_xp_rejected(self):
        """Negative XP raises ValidationError."""
        with pytest.raises(ValidationError):
            calculate_level_from_total_xp(-1)


@pytest.mark.unit
class TestLevelProgress:
    """Test progress toward the next level."""

    def test_progress_within_level(self):
        """900 XP is 99 XP into level 3, which costs 800 to leave."""
        # Act
        progress = calculate_level_progress(900)

        # Assert
        assert progress.level == 3
        assert progress.xp_in_level == 99
        assert progress.xp_needed_for_next_level == calculate_xp_for_level(4) - 99
        assert progress.progress_percent == 12
        assert progress.is_max_level is False

    def test_max_level_reports_full_progress(self):
        """At the max level nothing more is needed."""
        progress = calculate_level_progress(calculate_total_xp_for_level(MAX_PLAYER_LEVEL))

        assert progress.level == MAX_PLAYER_LEVEL
        assert progress.is_max_level is True
        assert progress.xp_needed_for_next_level == 0
        assert progress.progress_percent == 100
