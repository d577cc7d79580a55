"""
Rewards Ledger Service
======================

Purpose
-------
Own the loyalty-points ledger: balance, lifetime earned points, the tier
derived from them, and the append-only history of every movement.

Domain
------
- Read the ledger with tier progress (`get_reward_points`)
- Page through history, newest first (`get_reward_history`)
- Earn points (`add_points`) and spend them (`deduct_points`)

Invariants
----------
- balance >= 0 and balance <= lifetime_earned
- lifetime_earned only grows; spending never reduces it
- the stored tier always matches lifetime_earned under the tier table
- every balance change writes exactly one history entry in the same
  transaction

Design Notes
------------
- The ledger row is created lazily (zero balance, lowest tier) the first
  time a player touches it, including on reads.
- Writes lock the ledger row with SELECT ... FOR UPDATE.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Dict, Optional

from alchemy.core.config.config import Config
from alchemy.core.database.base import utc_now
from alchemy.core.validation.input_validator import InputValidator
from alchemy.database.models import RewardHistoryType
from alchemy.modules.rewards.tiers import TierTable
from alchemy.modules.shared.base_service import BaseService
from alchemy.modules.shared.exceptions import InsufficientBalanceError

if TYPE_CHECKING:
    from logging import Logger

    from alchemy.core.config.manager import ConfigManager
    from alchemy.core.event.bus import EventBus
    from alchemy.database.models import RewardPoints
    from alchemy.modules.shared.unit_of_work import UnitOfWork, UnitOfWorkFactory


class RewardsLedgerService(BaseService):
    """
    Service for the loyalty-points ledger.

    Public Methods
    --------------
    - get_reward_points() -> Balance, lifetime, tier and next-tier progress
    - get_reward_history() -> Paged history, newest first
    - add_points() -> Earn points, possibly changing tier
    - deduct_points() -> Spend points
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        tier_table: Optional[TierTable] = None,
        unit_of_work: Optional[UnitOfWorkFactory] = None,
        read_only_unit_of_work: Optional[UnitOfWorkFactory] = None,
    ) -> None:
        super().__init__(
            config_manager,
            event_bus,
            logger,
            unit_of_work=unit_of_work,
            read_only_unit_of_work=read_only_unit_of_work,
        )
        self.tiers = tier_table or TierTable.from_config(config_manager)

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_reward_points(self, user_id: str) -> Dict[str, Any]:
        """
        Get the player's ledger, creating an empty one on first access.

        Returns:
            Dict with balance, lifetime_earned, tier, next_tier,
            points_to_next_tier, progress_to_next_tier
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")

        async with self.unit_of_work() as uow:
            ledger = await self.get_or_create_ledger(uow, user_id)
            balance = ledger.balance
            lifetime_earned = ledger.lifetime_earned

        info = self.tiers.get_tier_info(lifetime_earned)
        return {
            "user_id": user_id,
            "balance": balance,
            "lifetime_earned": lifetime_earned,
            **info.to_dict(),
        }

    async def get_reward_history(
        self,
        user_id: str,
        page: int = 1,
        per_page: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Page through the player's history, newest first.

        Returns:
            Dict with `history` (list of entries) and `pagination`
            {page, per_page, total, total_pages}

        Raises:
            ValidationError: If page or per_page is below 1, or per_page
                exceeds the configured maximum
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")

        default_per_page = self.get_config(
            "rewards.history.default_per_page", Config.REWARD_HISTORY_DEFAULT_PER_PAGE
        )
        max_per_page = self.get_config(
            "rewards.history.max_per_page", Config.REWARD_HISTORY_MAX_PER_PAGE
        )
        page, per_page = InputValidator.validate_page_params(
            page,
            default_per_page if per_page is None else per_page,
            max_per_page,
        )

        async with self.read_only_unit_of_work() as uow:
            total = await uow.history.count_for_user(user_id)
            entries = await uow.history.list_page(user_id, page, per_page)
            history = [
                {
                    "id": entry.id,
                    "type": entry.type,
                    "points": entry.points,
                    "description": entry.description,
                    "order_id": entry.order_id,
                    "created_at": entry.created_at,
                }
                for entry in entries
            ]

        return {
            "history": history,
            "pagination": {
                "page": page,
                "per_page": per_page,
                "total": total,
                "total_pages": math.ceil(total / per_page) if total else 0,
            },
        }

    # ========================================================================
    # PUBLIC API - Write Operations
    # ========================================================================

    async def add_points(
        self,
        user_id: str,
        points: int,
        description: str,
        order_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Earn points.

        Increases balance and lifetime earned by `points`, recomputes the
        tier and appends an `earned` history entry, all in one transaction.

        Returns:
            Dict with points_added, balance, lifetime_earned, tier,
            tier_updated

        Raises:
            ValidationError: If points is not a positive integer
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        points = InputValidator.validate_positive_integer(points, "points")
        description = InputValidator.validate_description(description)
        if order_id is not None:
            order_id = InputValidator.validate_identifier(order_id, "order_id")

        self.log_operation("add_points", user_id=user_id, points=points, order_id=order_id)

        try:
            async with self.unit_of_work() as uow:
                ledger = await self.get_or_create_ledger(uow, user_id)
                old_tier = ledger.tier

                ledger.balance += points
                ledger.lifetime_earned += points
                tier_updated = self._refresh_tier(ledger)

                uow.history.append(
                    user_id,
                    RewardHistoryType.EARNED.value,
                    points,
                    description,
                    order_id=order_id,
                )

                result = {
                    "points_added": points,
                    "balance": ledger.balance,
                    "lifetime_earned": ledger.lifetime_earned,
                    "tier": ledger.tier,
                    "tier_updated": tier_updated,
                }
        except Exception as exc:
            self.log_error("add_points", exc, user_id=user_id, points=points)
            raise

        await self.emit_event(
            "rewards.points_added",
            {
                "user_id": user_id,
                "points": points,
                "balance": result["balance"],
                "order_id": order_id,
            },
        )
        if tier_updated:
            await self.emit_event(
                "rewards.tier_changed",
                {"user_id": user_id, "old_tier": old_tier, "new_tier": result["tier"]},
            )

        return result

    async def deduct_points(
        self, user_id: str, points: int, description: str
    ) -> Dict[str, Any]:
        """
        Spend points. Lifetime earned and tier are unchanged.

        Returns:
            Dict with points_deducted, balance

        Raises:
            ValidationError: If points is not a positive integer
            InsufficientBalanceError: If the balance is below `points`; the
                balance is left unchanged
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        points = InputValidator.validate_positive_integer(points, "points")
        description = InputValidator.validate_description(description)

        self.log_operation("deduct_points", user_id=user_id, points=points)

        try:
            async with self.unit_of_work() as uow:
                ledger = await self.get_or_create_ledger(uow, user_id)
                self.spend(uow, ledger, points, description)
                balance = ledger.balance
        except Exception as exc:
            self.log_error("deduct_points", exc, user_id=user_id, points=points)
            raise

        await self.emit_event(
            "rewards.points_deducted",
            {"user_id": user_id, "points": points, "balance": balance},
        )

        return {"points_deducted": points, "balance": balance}

    # ========================================================================
    # HELPERS (shared with RedemptionService, caller owns the unit of work)
    # ========================================================================

    async def get_or_create_ledger(self, uow: UnitOfWork, user_id: str) -> RewardPoints:
        """Locked ledger row, created with the lowest tier if missing."""
        return await uow.points.get_or_create_for_update(user_id, self.tiers.lowest)

    def spend(
        self, uow: UnitOfWork, ledger: RewardPoints, points: int, description: str
    ) -> None:
        """
        Deduct from a locked ledger and append the `redeemed` history entry.

        Raises:
            InsufficientBalanceError: If the balance is below `points`
        """
        if ledger.balance < points:
            raise InsufficientBalanceError(required=points, current=ledger.balance)

        ledger.balance -= points
        uow.history.append(
            ledger.user_id,
            RewardHistoryType.REDEEMED.value,
            -points,
            description,
        )

    def current_tier(self, ledger: Optional[RewardPoints]) -> str:
        """Tier derived from lifetime earned points (lowest tier without a ledger)."""
        if ledger is None:
            return self.tiers.lowest
        return self.tiers.tier_for(ledger.lifetime_earned)

    def _refresh_tier(self, ledger: RewardPoints) -> bool:
        new_tier = self.tiers.tier_for(ledger.lifetime_earned)
        if new_tier == ledger.tier:
            return False
        ledger.tier = new_tier
        ledger.tier_updated_at = utc_now()
        return True
