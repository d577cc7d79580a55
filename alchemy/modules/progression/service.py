"""
Progression Service
===================

Purpose
-------
Own the player's XP, level and login streak. Levels are always derived from
`total_xp` through the shared leveling curve, so a stored level can never
drift from the XP that produced it.

Domain
------
- Read progression state (`get_progress`, `get_level_progress`)
- Record daily logins and maintain streaks (`record_login`)
- Apply XP inside another service's unit of work (`apply_xp`)

Design Notes
------------
- Read operations use the read-only unit of work and raise NotFoundError
  when the player has no state yet.
- `apply_xp` never opens a transaction of its own; the caller's unit of
  work owns commit and rollback.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from alchemy.core.database.base import ensure_utc, utc_now
from alchemy.core.validation.input_validator import InputValidator
from alchemy.modules.shared.base_service import BaseService
from alchemy.modules.shared.exceptions import NotFoundError
from alchemy.modules.shared.formulas import (
    calculate_level_from_total_xp,
    calculate_level_progress,
)

if TYPE_CHECKING:
    from alchemy.database.models import PlayerState
    from alchemy.modules.shared.unit_of_work import UnitOfWork


@dataclass(frozen=True)
class XpAward:
    """Outcome of applying XP to a player."""

    xp_gained: int
    old_level: int
    new_level: int
    total_xp: int

    @property
    def leveled_up(self) -> bool:
        return self.new_level > self.old_level


def _progress_view(user_id: str, state: PlayerState) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "level": state.level,
        "xp": state.xp,
        "total_xp": state.total_xp,
        "current_streak": state.current_streak,
        "longest_streak": state.longest_streak,
        "last_login_at": state.last_login_at,
        "last_daily_reward_at": state.last_daily_reward_at,
    }


class ProgressionService(BaseService):
    """
    Service for player XP, levels and login streaks.

    Public Methods
    --------------
    - get_progress() -> Current progression snapshot
    - get_level_progress() -> Progress toward the next level
    - record_login() -> Update login streak for today
    - apply_xp() -> Add XP within an open unit of work
    """

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_progress(self, user_id: str) -> Dict[str, Any]:
        """
        Get a player's progression state.

        Returns:
            Dict with level, xp, total_xp, current_streak, longest_streak,
            last_login_at, last_daily_reward_at

        Raises:
            NotFoundError: If the player has no progression state
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")

        async with self.read_only_unit_of_work() as uow:
            state = await uow.players.get_by_user(user_id)
            if state is None:
                raise NotFoundError("PlayerState", user_id)
            return _progress_view(user_id, state)

    async def get_level_progress(self, user_id: str) -> Dict[str, Any]:
        """
        Break the player's total XP down into level and progress.

        Raises:
            NotFoundError: If the player has no progression state
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")

        async with self.read_only_unit_of_work() as uow:
            state = await uow.players.get_by_user(user_id)
            if state is None:
                raise NotFoundError("PlayerState", user_id)
            total_xp = state.total_xp

        progress = calculate_level_progress(total_xp)
        return {
            "user_id": user_id,
            "level": progress.level,
            "total_xp": total_xp,
            "xp_in_level": progress.xp_in_level,
            "xp_needed_for_next_level": progress.xp_needed_for_next_level,
            "progress_percent": progress.progress_percent,
            "is_max_level": progress.is_max_level,
        }

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def record_login(
        self, user_id: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Record a login and update the daily streak.

        Streaks count consecutive UTC calendar days: a login on the day after
        the previous one extends the streak, a second login on the same day
        leaves it unchanged, and any longer gap restarts it at 1.

        Returns:
            Dict with current_streak, longest_streak, streak_extended,
            last_login_at
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        now = ensure_utc(now) if now is not None else utc_now()

        self.log_operation("record_login", user_id=user_id)

        async with self.unit_of_work() as uow:
            state = await uow.players.get_or_create_for_update(user_id)

            today = now.date()
            previous = (
                ensure_utc(state.last_login_at).date()
                if state.last_login_at is not None
                else None
            )

            streak_extended = False
            if previous is None or (today - previous).days > 1:
                state.current_streak = 1
                streak_extended = True
            elif (today - previous).days == 1:
                state.current_streak += 1
                streak_extended = True
            # Same day (or a clock earlier than the last login) keeps the streak

            state.longest_streak = max(state.longest_streak, state.current_streak)
            if previous is None or today >= previous:
                state.last_login_at = now

            result = {
                "user_id": user_id,
                "current_streak": state.current_streak,
                "longest_streak": state.longest_streak,
                "streak_extended": streak_extended,
                "last_login_at": state.last_login_at,
            }

        self.log.info(
            f"Login recorded for {user_id} (streak: {result['current_streak']})",
            extra={
                "user_id": user_id,
                "current_streak": result["current_streak"],
                "longest_streak": result["longest_streak"],
                "streak_extended": streak_extended,
            },
        )
        return result

    async def apply_xp(self, uow: UnitOfWork, user_id: str, amount: int) -> XpAward:
        """
        Add XP to a player inside the caller's unit of work.

        Creates the progression state if the player has none. `total_xp`
        only ever grows; the level is recomputed from it.
        """
        self.validate_non_negative_int(amount, "xp_reward")

        state = await uow.players.get_or_create_for_update(user_id)
        old_level = state.level

        state.total_xp += amount
        state.xp += amount
        state.level = calculate_level_from_total_xp(state.total_xp)

        return XpAward(
            xp_gained=amount,
            old_level=old_level,
            new_level=state.level,
            total_xp=state.total_xp,
        )
