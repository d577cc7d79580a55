"""
Loyalty Tier Model

Purpose
-------
Map a player's lifetime earned points onto an ordered list of named tiers.
A lifetime total exactly equal to a threshold belongs to that tier.

The table is balance configuration: it is read from `rewards.tiers` in
`config/rewards.yaml` and falls back to the built-in defaults:

    Novice 0, Adept 500, Alchemist 2000, Master 5000, Grandmaster 10000

Usage
-----
    table = TierTable.from_config(ConfigManager)
    info = table.get_tier_info(750)
    info.tier, info.next_tier, info.points_to_next_tier  # Adept, Alchemist, 1250
"""

from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from alchemy.core.config.errors import ConfigValidationError
from alchemy.core.config.manager import ConfigManager
from alchemy.modules.shared.constants import DEFAULT_TIERS
from alchemy.modules.shared.exceptions import ValidationError


@dataclass(frozen=True)
class Tier:
    name: str
    min_lifetime_points: int


@dataclass(frozen=True)
class TierInfo:
    """Where a lifetime total sits in the tier table."""

    tier: str
    next_tier: Optional[str]
    points_to_next_tier: Optional[int]
    progress_to_next_tier: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier,
            "next_tier": self.next_tier,
            "points_to_next_tier": self.points_to_next_tier,
            "progress_to_next_tier": self.progress_to_next_tier,
        }


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class TierTable:
    """
    Immutable, validated tier table.

    Raises:
        ConfigValidationError: If the table is empty, does not start at 0,
            has duplicate names or thresholds that do not strictly ascend
    """

    CONFIG_KEY = "rewards.tiers"

    def __init__(self, tiers: Iterable[Tuple[str, int]]) -> None:
        parsed = [Tier(name=str(name), min_lifetime_points=threshold) for name, threshold in tiers]
        self._validate(parsed)
        self._tiers: Tuple[Tier, ...] = tuple(parsed)
        self._thresholds: Tuple[int, ...] = tuple(t.min_lifetime_points for t in parsed)
        self._ranks: Dict[str, int] = {t.name: index for index, t in enumerate(parsed)}

    @staticmethod
    def _validate(tiers: List[Tier]) -> None:
        if not tiers:
            raise ConfigValidationError("Tier table must define at least one tier")

        for tier in tiers:
            threshold = tier.min_lifetime_points
            if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
                raise ConfigValidationError(
                    f"Tier '{tier.name}' threshold must be a non-negative integer, got {threshold!r}"
                )

        if tiers[0].min_lifetime_points != 0:
            raise ConfigValidationError("The lowest tier must start at 0 lifetime points")

        names = [t.name for t in tiers]
        if len(set(names)) != len(names):
            raise ConfigValidationError(f"Tier names must be unique, got {names}")

        for lower, upper in zip(tiers, tiers[1:]):
            if upper.min_lifetime_points <= lower.min_lifetime_points:
                raise ConfigValidationError(
                    f"Tier thresholds must strictly ascend: "
                    f"'{lower.name}' ({lower.min_lifetime_points}) >= "
                    f"'{upper.name}' ({upper.min_lifetime_points})"
                )

    @classmethod
    def from_config(cls, config_manager: ConfigManager) -> TierTable:
        """
        Build the table from `rewards.tiers`, a list of
        ``{name, min_lifetime_points}`` mappings.
        """
        return cls.from_raw(config_manager.get(cls.CONFIG_KEY, None))

    @classmethod
    def from_raw(cls, raw: Any) -> TierTable:
        if not raw:
            return cls(DEFAULT_TIERS)

        if not isinstance(raw, list):
            raise ConfigValidationError(f"'{cls.CONFIG_KEY}' must be a list of tiers")

        entries: List[Tuple[str, int]] = []
        for item in raw:
            if not isinstance(item, dict) or "name" not in item or "min_lifetime_points" not in item:
                raise ConfigValidationError(
                    f"Each entry in '{cls.CONFIG_KEY}' needs 'name' and 'min_lifetime_points', got {item!r}"
                )
            entries.append((item["name"], item["min_lifetime_points"]))
        return cls(entries)

    @property
    def tiers(self) -> Tuple[Tier, ...]:
        return self._tiers

    @property
    def lowest(self) -> str:
        return self._tiers[0].name

    def tier_for(self, lifetime_earned: int) -> str:
        index = bisect_right(self._thresholds, max(lifetime_earned, 0)) - 1
        return self._tiers[index].name

    def __contains__(self, tier_name: object) -> bool:
        return tier_name in self._ranks

    def rank(self, tier_name: str) -> int:
        """
        Position of a tier in the table (0 is the lowest).

        Raises:
            ValidationError: If the tier name is not in the table
        """
        try:
            return self._ranks[tier_name]
        except KeyError:
            raise ValidationError("tier", f"Unknown tier '{tier_name}'") from None

    def get_tier_info(self, lifetime_earned: int) -> TierInfo:
        """
        Describe the tier for a lifetime total and the distance to the next.

        Progress is the round-half-up percentage through the current band,
        clamped to 0..100. At the top tier there is no next tier and progress
        is 100.
        """
        lifetime_earned = max(lifetime_earned, 0)
        index = bisect_right(self._thresholds, lifetime_earned) - 1
        current = self._tiers[index]

        if index == len(self._tiers) - 1:
            return TierInfo(
                tier=current.name,
                next_tier=None,
                points_to_next_tier=None,
                progress_to_next_tier=100,
            )

        upcoming = self._tiers[index + 1]
        band = upcoming.min_lifetime_points - current.min_lifetime_points
        into_band = lifetime_earned - current.min_lifetime_points
        progress = _round_half_up(into_band * 100 / band)

        return TierInfo(
            tier=current.name,
            next_tier=upcoming.name,
            points_to_next_tier=upcoming.min_lifetime_points - lifetime_earned,
            progress_to_next_tier=max(0, min(100, progress)),
        )


def _validate_tier_override(value: Any) -> Any:
    """Reject a `rewards.tiers` override that would not build a valid table."""
    TierTable.from_raw(value)
    return value


ConfigManager.register_validator(TierTable.CONFIG_KEY, _validate_tier_override)
