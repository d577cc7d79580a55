"""
Alchemy Progression Formulas

Purpose
-------
Pure calculation functions for the leveling curve. The server result is
authoritative; any client rendering a level bar must use the same curve.

Design Notes
------------
- Pure functions only (no side effects, no database, no config access)
- Deterministic and monotonic: for a <= b, level(a) <= level(b)
- The cumulative XP table is computed once at import time

Usage
-----
    from alchemy.modules.shared.formulas import calculate_level_from_total_xp

    level = calculate_level_from_total_xp(900)  # -> 3
"""

from __future__ import annotations

import math
from bisect import bisect_right
from dataclasses import dataclass
from typing import Tuple

from alchemy.modules.shared.constants import (
    MAX_PLAYER_LEVEL,
    MIN_PLAYER_LEVEL,
    XP_CURVE_BASE,
    XP_CURVE_EXPONENT,
)
from alchemy.modules.shared.exceptions import ValidationError


def calculate_xp_for_level(level: int) -> int:
    """
    XP needed to advance from ``level - 1`` to ``level``.

    Level 1 is the starting level and needs nothing.

    Example:
        >>> calculate_xp_for_level(2)
        282
        >>> calculate_xp_for_level(3)
        519
    """
    if level <= MIN_PLAYER_LEVEL:
        return 0
    return math.floor(XP_CURVE_BASE * level**XP_CURVE_EXPONENT)


def _build_cumulative_table() -> Tuple[int, ...]:
    # Index i holds the total XP needed to reach level i + 1
    table = [0]
    for level in range(MIN_PLAYER_LEVEL + 1, MAX_PLAYER_LEVEL + 1):
        table.append(table[-1] + calculate_xp_for_level(level))
    return tuple(table)


_CUMULATIVE_XP: Tuple[int, ...] = _build_cumulative_table()


def calculate_total_xp_for_level(level: int) -> int:
    """
    Total XP required to reach ``level`` from level 1.

    Example:
        >>> calculate_total_xp_for_level(3)
        801
    """
    if level < MIN_PLAYER_LEVEL or level > MAX_PLAYER_LEVEL:
        raise ValidationError(
            "level", f"must be between {MIN_PLAYER_LEVEL} and {MAX_PLAYER_LEVEL}"
        )
    return _CUMULATIVE_XP[level - 1]


def calculate_level_from_total_xp(total_xp: int) -> int:
    """
    Level reached with ``total_xp`` accumulated XP, capped at the max level.

    Example:
        >>> calculate_level_from_total_xp(800)
        2
        >>> calculate_level_from_total_xp(900)
        3
    """
    if total_xp < 0:
        raise ValidationError("total_xp", "cannot be negative")
    return bisect_right(_CUMULATIVE_XP, total_xp)


@dataclass(frozen=True)
class LevelProgress:
    level: int
    xp_in_level: int
    xp_needed_for_next_level: int
    progress_percent: int
    is_max_level: bool


def calculate_level_progress(total_xp: int) -> LevelProgress:
    """
    Break ``total_xp`` down into the current level and progress toward the next.

    At the max level the progress is reported as 100% with nothing needed.
    """
    level = calculate_level_from_total_xp(total_xp)
    xp_in_level = total_xp - _CUMULATIVE_XP[level - 1]

    if level >= MAX_PLAYER_LEVEL:
        return LevelProgress(
            level=level,
            xp_in_level=xp_in_level,
            xp_needed_for_next_level=0,
            progress_percent=100,
            is_max_level=True,
        )

    needed = calculate_xp_for_level(level + 1)
    percent = min(100, math.floor(xp_in_level * 100 / needed))

    return LevelProgress(
        level=level,
        xp_in_level=xp_in_level,
        xp_needed_for_next_level=needed - xp_in_level,
        progress_percent=percent,
        is_max_level=False,
    )
