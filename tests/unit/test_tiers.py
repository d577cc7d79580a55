"""
Unit tests for the loyalty tier table.

Tests tier lookup, next-tier progress, ranking and table validation.
"""

import pytest

from alchemy.core.config.errors import ConfigValidationError
from alchemy.core.config.manager import ConfigManager
from alchemy.modules.rewards.tiers import DEFAULT_TIERS, TierTable
from alchemy.modules.shared.exceptions import ValidationError


@pytest.fixture
def tiers():
    return TierTable(DEFAULT_TIERS)


@pytest.mark.unit
class TestTierLookup:
    """Test tier_for and get_tier_info."""

    @pytest.mark.parametrize(
        "lifetime,expected",
        [
            (0, "Novice"),
            (499, "Novice"),
            (500, "Adept"),
            (1999, "Adept"),
            (2000, "Alchemist"),
            (5000, "Master"),
            (10000, "Grandmaster"),
            (250000, "Grandmaster"),
        ],
    )
    def test_threshold_is_inclusive(self, tiers, lifetime, expected):
        """A lifetime total equal to a threshold belongs to that tier."""
        assert tiers.tier_for(lifetime) == expected

    def test_progress_through_band(self, tiers):
        """750 lifetime points is Adept, 1250 short of Alchemist, 17% through."""
        # Act
        info = tiers.get_tier_info(750)

        # Assert
        assert info.tier == "Adept"
        assert info.next_tier == "Alchemist"
        assert info.points_to_next_tier == 1250
        assert info.progress_to_next_tier == 17

    def test_progress_rounds_half_up(self):
        """Exactly half a percent rounds up."""
        table = TierTable([("Low", 0), ("High", 200)])

        assert table.get_tier_info(1).progress_to_next_tier == 1

    def test_band_start_is_zero_progress(self, tiers):
        """Landing exactly on a threshold starts the next band at 0%."""
        info = tiers.get_tier_info(2000)

        assert info.tier == "Alchemist"
        assert info.progress_to_next_tier == 0
        assert info.points_to_next_tier == 3000

    def test_top_tier_has_no_next(self, tiers):
        """Grandmaster has no next tier and reports full progress."""
        info = tiers.get_tier_info(12000)

        assert info.to_dict() == {
            "tier": "Grandmaster",
            "next_tier": None,
            "points_to_next_tier": None,
            "progress_to_next_tier": 100,
        }


@pytest.mark.unit
class TestTierRank:
    """Test tier ordering."""

    def test_ranks_follow_table_order(self, tiers):
        """Ranks ascend with the thresholds."""
        ranks = [tiers.rank(tier.name) for tier in tiers.tiers]

        assert ranks == [0, 1, 2, 3, 4]
        assert tiers.lowest == "Novice"

    def test_unknown_tier_raises_validation_error(self, tiers):
        """Ranking a name outside the table is a validation failure."""
        with pytest.raises(ValidationError):
            tiers.rank("Legendary")

    def test_membership(self, tiers):
        assert "Adept" in tiers
        assert "Legendary" not in tiers


@pytest.mark.unit
class TestTierTableValidation:
    """Test rejection of malformed tier tables."""

    @pytest.mark.parametrize(
        "entries",
        [
            [],
            [("Novice", 10), ("Adept", 500)],
            [("Novice", 0), ("Adept", 500), ("Adept", 900)],
            [("Novice", 0), ("Adept", 500), ("Alchemist", 500)],
            [("Novice", 0), ("Adept", -5)],
            [("Novice", 0), ("Adept", "500")],
        ],
    )
    def test_invalid_tables_rejected(self, entries):
        """Empty, non-zero start, duplicate, flat, negative or non-int tables fail."""
        with pytest.raises(ConfigValidationError):
            TierTable(entries)

    def test_from_raw_falls_back_to_defaults(self):
        """An absent config value builds the built-in table."""
        table = TierTable.from_raw(None)

        assert [t.name for t in table.tiers] == [name for name, _ in DEFAULT_TIERS]

    def test_from_raw_requires_name_and_threshold(self):
        """Entries missing a key are rejected."""
        with pytest.raises(ConfigValidationError):
            TierTable.from_raw([{"name": "Novice"}])

    def test_from_config_reads_yaml_tiers(self):
        """The shipped rewards.yaml defines the five default tiers."""
        table = TierTable.from_config(ConfigManager)

        assert table.tier_for(750) == "Adept"
        assert len(table.tiers) == 5

    def test_invalid_override_blocked_by_validator(self):
        """Setting a broken tier table through ConfigManager fails before it is stored."""
        with pytest.raises(ConfigValidationError):
            ConfigManager.set(TierTable.CONFIG_KEY, [{"name": "Novice", "min_lifetime_points": 5}])

        assert TierTable.from_config(ConfigManager).lowest == "Novice"

    def test_valid_override_used_by_from_config(self):
        """A valid override replaces the YAML table."""
        # Arrange
        ConfigManager.set(
            TierTable.CONFIG_KEY,
            [
                {"name": "Bronze", "min_lifetime_points": 0},
                {"name": "Gold", "min_lifetime_points": 100},
            ],
        )

        # Act
        table = TierTable.from_config(ConfigManager)

        # Assert
        assert table.tier_for(150) == "Gold"
