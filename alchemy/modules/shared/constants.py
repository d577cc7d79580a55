"""
Alchemy Domain Constants

Purpose
-------
Provide domain-level constants for progression and loyalty rules. The
leveling curve lives here rather than in YAML because the same curve is
evaluated by clients for display; the server value is authoritative and the
two must never drift.

Design Notes
------------
- Values are annotated with typing.Final to signal immutability
- Grouped by system (leveling, quests, rewards)
- Tier thresholds are balance data and live in `config/rewards.yaml`;
  `DEFAULT_TIERS` is only the fallback when that file is absent
"""

from __future__ import annotations

from typing import Final, Tuple

# ============================================================================
# LEVELING SYSTEM
# ============================================================================

MIN_PLAYER_LEVEL: Final[int] = 1
MAX_PLAYER_LEVEL: Final[int] = 1000

# XP to advance from level L-1 to L is floor(XP_CURVE_BASE * L ** XP_CURVE_EXPONENT)
XP_CURVE_BASE: Final[int] = 100
XP_CURVE_EXPONENT: Final[float] = 1.5

# ============================================================================
# QUESTS
# ============================================================================

DEFAULT_QUEST_GOAL: Final[int] = 1
QUEST_INGREDIENT_ITEM_TYPE: Final[str] = "ingredient"

# ============================================================================
# REWARDS / LOYALTY
# ============================================================================

DEFAULT_TIERS: Final[Tuple[Tuple[str, int], ...]] = (
    ("Novice", 0),
    ("Adept", 500),
    ("Alchemist", 2000),
    ("Master", 5000),
    ("Grandmaster", 10000),
)

REDEMPTION_DESCRIPTION_PREFIX: Final[str] = "Redeemed: "
