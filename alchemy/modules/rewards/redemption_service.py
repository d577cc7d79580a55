"""
Redemption Service
==================

Purpose
-------
Turn loyalty points into catalog rewards.

Guards, checked in order on locked rows inside one transaction:
    1. The reward exists and is active, else NotFoundError
    2. It is unlimited (stock None) or in stock, else OutOfStockError
    3. The balance covers the cost, else InsufficientBalanceError
    4. The player's tier ranks at or above the reward's minimum tier,
       else TierTooLowError naming the required tier

On success the cost is deducted (lifetime earned unchanged), stock is
decremented when limited, and a "Redeemed: <name>" history entry is
written. Two concurrent redemptions of the last unit cannot both succeed:
the stock check and decrement happen on the same locked row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from alchemy.core.logging.logger import LogContext
from alchemy.core.validation.input_validator import InputValidator
from alchemy.modules.shared.base_service import BaseService
from alchemy.modules.shared.constants import REDEMPTION_DESCRIPTION_PREFIX
from alchemy.modules.shared.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    OutOfStockError,
    TierTooLowError,
)

if TYPE_CHECKING:
    from logging import Logger

    from alchemy.core.config.manager import ConfigManager
    from alchemy.core.event.bus import EventBus
    from alchemy.database.models import Reward
    from alchemy.modules.rewards.ledger_service import RewardsLedgerService
    from alchemy.modules.shared.unit_of_work import UnitOfWorkFactory


def _reward_view(reward: Reward) -> Dict[str, Any]:
    return {
        "id": reward.id,
        "name": reward.name,
        "description": reward.description,
        "points_cost": reward.points_cost,
        "discount_type": reward.discount_type,
        "discount_value": reward.discount_value,
        "product_id": reward.product_id,
        "minimum_tier": reward.minimum_tier,
        "stock": reward.stock,
    }


class RedemptionService(BaseService):
    """
    Service for catalog reward redemption.

    Public Methods
    --------------
    - get_available_rewards() -> In-stock catalog with eligibility flags
    - redeem_reward() -> Atomically spend points on a reward
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        ledger_service: RewardsLedgerService,
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
        self._ledger = ledger_service

    async def get_available_rewards(self, user_id: str) -> List[Dict[str, Any]]:
        """
        List active, in-stock rewards (cheapest first) with, for this player,
        `is_eligible` (tier), `can_afford` (balance) and
        `can_redeem = is_eligible and can_afford`.

        Read-only: a player without a ledger is treated as balance 0 at the
        lowest tier. A reward whose minimum tier is not in the tier table is
        listed as not eligible rather than failing the listing.
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        tiers = self._ledger.tiers

        async with self.read_only_unit_of_work() as uow:
            ledger = await uow.points.get_by_user(user_id)
            rewards = await uow.catalog.list_available()

            balance = ledger.balance if ledger is not None else 0
            player_rank = tiers.rank(self._ledger.current_tier(ledger))

            available = []
            for reward in rewards:
                if reward.minimum_tier in tiers:
                    is_eligible = player_rank >= tiers.rank(reward.minimum_tier)
                else:
                    self.log.warning(
                        "Catalog reward has unknown minimum tier",
                        extra={
                            "reward_id": reward.id,
                            "minimum_tier": reward.minimum_tier,
                        },
                    )
                    is_eligible = False
                can_afford = balance >= reward.points_cost
                available.append(
                    {
                        **_reward_view(reward),
                        "is_eligible": is_eligible,
                        "can_afford": can_afford,
                        "can_redeem": is_eligible and can_afford,
                    }
                )

        return available

    async def redeem_reward(self, user_id: str, reward_id: str) -> Dict[str, Any]:
        """
        Redeem a catalog reward.

        Returns:
            Dict with success, points_spent, balance and reward (id, name,
            discount_type, discount_value, product_id)

        Raises:
            NotFoundError, OutOfStockError, InsufficientBalanceError,
            TierTooLowError
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        reward_id = InputValidator.validate_identifier(reward_id, "reward_id")
        tiers = self._ledger.tiers

        with LogContext(user_id=user_id, operation="redeem_reward"):
            self.log_operation("redeem_reward", user_id=user_id, reward_id=reward_id)

            try:
                async with self.unit_of_work() as uow:
                    reward = await uow.catalog.get_for_update(reward_id)
                    if reward is None or not reward.is_active:
                        raise NotFoundError("Reward", reward_id)

                    if reward.stock is not None and reward.stock <= 0:
                        raise OutOfStockError(reward.id, reward.name)

                    ledger = await self._ledger.get_or_create_ledger(uow, user_id)
                    if ledger.balance < reward.points_cost:
                        raise InsufficientBalanceError(
                            required=reward.points_cost, current=ledger.balance
                        )

                    player_tier = self._ledger.current_tier(ledger)
                    if tiers.rank(player_tier) < tiers.rank(reward.minimum_tier):
                        raise TierTooLowError(reward.minimum_tier, player_tier)

                    self._ledger.spend(
                        uow,
                        ledger,
                        reward.points_cost,
                        f"{REDEMPTION_DESCRIPTION_PREFIX}{reward.name}",
                    )
                    if reward.stock is not None:
                        reward.stock -= 1

                    points_spent = reward.points_cost
                    balance = ledger.balance
                    reward_summary = {
                        "id": reward.id,
                        "name": reward.name,
                        "discount_type": reward.discount_type,
                        "discount_value": reward.discount_value,
                        "product_id": reward.product_id,
                    }
            except Exception as exc:
                self.log_error("redeem_reward", exc, user_id=user_id, reward_id=reward_id)
                raise

        await self.emit_event(
            "rewards.redeemed",
            {
                "user_id": user_id,
                "reward_id": reward_id,
                "points_spent": points_spent,
                "balance": balance,
            },
        )

        self.log.info(
            f"Reward redeemed: {reward_summary['name']} (-{points_spent} points)",
            extra={
                "user_id": user_id,
                "reward_id": reward_id,
                "points_spent": points_spent,
                "balance": balance,
            },
        )

        return {
            "success": True,
            "points_spent": points_spent,
            "balance": balance,
            "reward": reward_summary,
        }
