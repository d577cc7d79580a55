"""
Quest Service
=============

Purpose
-------
Manage a player's quest instances through their forward-only lifecycle

    available -> active -> completed -> claimed

and orchestrate the claim: the one operation that moves XP, inventory and
cosmetics together.

Domain
------
- List a player's quests (`get_quests`)
- Offer a catalog quest to a player (`make_available`)
- Start it (`start_quest`) and record progress until the goal auto-completes
  it (`record_progress`)
- Claim the rewards exactly once (`claim_quest`)

Design Notes
------------
- Every write runs in a single unit of work with the PlayerQuest row read
  via SELECT ... FOR UPDATE, so the `claimed_at` guard is evaluated inside
  the same transaction as the writes it protects.
- XP, inventory and cosmetics are applied through the owning services'
  helpers on the same unit of work; any failure rolls back all of them.
- Events are emitted only after the unit of work commits.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from alchemy.core.database.base import utc_now
from alchemy.core.logging.logger import LogContext
from alchemy.core.validation.input_validator import InputValidator
from alchemy.database.models import PlayerQuest, QuestStatus
from alchemy.modules.shared.base_service import BaseService
from alchemy.modules.shared.constants import QUEST_INGREDIENT_ITEM_TYPE
from alchemy.modules.shared.exceptions import (
    AlreadyClaimedError,
    InvalidStateError,
    NotFoundError,
)

if TYPE_CHECKING:
    from logging import Logger

    from alchemy.core.config.manager import ConfigManager
    from alchemy.core.event.bus import EventBus
    from alchemy.modules.cosmetics.service import CosmeticsService
    from alchemy.modules.inventory.service import InventoryService
    from alchemy.modules.progression.service import ProgressionService
    from alchemy.modules.shared.unit_of_work import UnitOfWork, UnitOfWorkFactory


def _quest_view(player_quest: PlayerQuest) -> Dict[str, Any]:
    quest = player_quest.quest
    return {
        "id": player_quest.id,
        "quest_id": player_quest.quest_id,
        "name": quest.name,
        "description": quest.description,
        "quest_type": quest.quest_type,
        "status": player_quest.status,
        "progress": player_quest.progress,
        "goal": quest.goal,
        "xp_reward": quest.xp_reward,
        "ingredient_rewards": list(quest.ingredient_rewards or []),
        "cosmetic_rewards": list(quest.cosmetic_rewards or []),
        "started_at": player_quest.started_at,
        "completed_at": player_quest.completed_at,
        "claimed_at": player_quest.claimed_at,
    }


class QuestService(BaseService):
    """
    Service for quest lifecycle and reward claims.

    Public Methods
    --------------
    - get_quests() -> All of a player's quests with status/progress
    - make_available() -> Offer a catalog quest to a player
    - start_quest() -> available -> active
    - record_progress() -> Advance an active quest, completing it at its goal
    - claim_quest() -> Atomically award XP, ingredients and cosmetics once
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        event_bus: EventBus,
        logger: Logger,
        progression_service: ProgressionService,
        inventory_service: InventoryService,
        cosmetics_service: CosmeticsService,
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
        self._progression = progression_service
        self._inventory = inventory_service
        self._cosmetics = cosmetics_service

    # ========================================================================
    # PUBLIC API - Read Operations
    # ========================================================================

    async def get_quests(self, user_id: str) -> List[Dict[str, Any]]:
        """
        List the player's quests, oldest first.

        Raises:
            NotFoundError: If the player has no progression state
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")

        async with self.read_only_unit_of_work() as uow:
            if await uow.players.get_by_user(user_id) is None:
                raise NotFoundError("PlayerState", user_id)

            player_quests = await uow.player_quests.list_for_user(user_id)
            return [_quest_view(pq) for pq in player_quests]

    # ========================================================================
    # PUBLIC API - Lifecycle
    # ========================================================================

    async def make_available(self, user_id: str, quest_id: str) -> Dict[str, Any]:
        """
        Create the player's instance of a catalog quest.

        Idempotent: if the player already has the quest, its current state
        is returned unchanged.

        Raises:
            NotFoundError: If the quest does not exist or is inactive
            InvalidStateError: If the player's level is below the quest's
                required level
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        quest_id = InputValidator.validate_identifier(quest_id, "quest_id")

        self.log_operation("make_available", user_id=user_id, quest_id=quest_id)

        async with self.unit_of_work() as uow:
            existing = await uow.player_quests.get_for_user(user_id, quest_id)
            if existing is not None:
                return _quest_view(existing)

            quest = await uow.quests.get_active(quest_id)
            if quest is None:
                raise NotFoundError("Quest", quest_id)

            state = await uow.players.get_or_create_for_update(user_id)
            if state.level < quest.required_level:
                raise InvalidStateError(
                    "make_available",
                    f"requires level {quest.required_level}",
                    required_level=quest.required_level,
                    current_level=state.level,
                )

            # A concurrent make_available for the same quest inserts nothing
            await uow.player_quests.insert_if_absent(
                ["user_id", "quest_id"],
                user_id=user_id,
                quest_id=quest_id,
                status=QuestStatus.AVAILABLE.value,
                progress=0,
            )
            player_quest = await uow.player_quests.get_for_user(user_id, quest_id)
            assert player_quest is not None  # inserted above or by a concurrent writer
            return _quest_view(player_quest)

    async def start_quest(self, user_id: str, quest_id: str) -> Dict[str, Any]:
        """
        Move an available quest to active.

        Raises:
            NotFoundError: If the player does not have the quest
            InvalidStateError: If the quest is not available
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        quest_id = InputValidator.validate_identifier(quest_id, "quest_id")

        self.log_operation("start_quest", user_id=user_id, quest_id=quest_id)

        async with self.unit_of_work() as uow:
            player_quest = await self._get_locked(uow, user_id, quest_id)

            if player_quest.status != QuestStatus.AVAILABLE.value:
                raise InvalidStateError(
                    "start_quest",
                    "not available",
                    current_status=player_quest.status,
                )

            player_quest.status = QuestStatus.ACTIVE.value
            player_quest.started_at = utc_now()
            return _quest_view(player_quest)

    async def record_progress(
        self, user_id: str, quest_id: str, amount: int = 1
    ) -> Dict[str, Any]:
        """
        Advance an active quest by `amount`.

        When progress reaches the quest's goal, the quest completes: progress
        is capped at the goal and `completed_at` is set.

        Raises:
            NotFoundError: If the player does not have the quest
            InvalidStateError: If the quest is not active
            ValidationError: If amount is not a positive integer
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        quest_id = InputValidator.validate_identifier(quest_id, "quest_id")
        amount = InputValidator.validate_positive_integer(amount, "amount")

        async with self.unit_of_work() as uow:
            player_quest = await self._get_locked(uow, user_id, quest_id)

            if player_quest.status != QuestStatus.ACTIVE.value:
                raise InvalidStateError(
                    "record_progress",
                    "not active",
                    current_status=player_quest.status,
                )

            goal = player_quest.quest.goal
            player_quest.progress = min(goal, player_quest.progress + amount)

            completed = player_quest.progress >= goal
            if completed:
                player_quest.status = QuestStatus.COMPLETED.value
                player_quest.completed_at = utc_now()

            view = _quest_view(player_quest)

        if completed:
            self.log.info(
                f"Quest completed: {quest_id}",
                extra={"user_id": user_id, "quest_id": quest_id, "goal": goal},
            )
        return view

    # ========================================================================
    # PUBLIC API - Claim
    # ========================================================================

    async def claim_quest(self, user_id: str, quest_id: str) -> Dict[str, Any]:
        """
        Claim a completed quest's rewards.

        Guards, checked in order on the locked PlayerQuest row:
            1. The player has the quest, else NotFoundError
            2. It was not claimed before, else AlreadyClaimedError
            3. It is completed, else InvalidStateError("not completed")

        Then, in the same transaction: mark it claimed, add the XP reward
        and recompute the level, upsert ingredient rewards into inventory,
        and union cosmetic rewards into the unlocked themes.

        Returns:
            Dict with success, xp_gained, level, leveled_up

        Raises:
            NotFoundError, AlreadyClaimedError, InvalidStateError

        Example:
            >>> await quest_service.claim_quest("user-1", "quest-1")
            {"success": True, "xp_gained": 100, "level": 3, "leveled_up": True}
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        quest_id = InputValidator.validate_identifier(quest_id, "quest_id")

        with LogContext(user_id=user_id, operation="claim_quest"):
            self.log_operation("claim_quest", user_id=user_id, quest_id=quest_id)

            try:
                async with self.unit_of_work() as uow:
                    player_quest = await self._get_locked(uow, user_id, quest_id)

                    if (
                        player_quest.claimed_at is not None
                        or player_quest.status == QuestStatus.CLAIMED.value
                    ):
                        raise AlreadyClaimedError(quest_id, player_quest.claimed_at)

                    if player_quest.status != QuestStatus.COMPLETED.value:
                        raise InvalidStateError(
                            "claim_quest",
                            "not completed",
                            current_status=player_quest.status,
                        )

                    quest = player_quest.quest
                    player_quest.status = QuestStatus.CLAIMED.value
                    player_quest.claimed_at = utc_now()

                    award = await self._progression.apply_xp(uow, user_id, quest.xp_reward)

                    ingredients = [
                        (reward["ingredient_id"], reward["quantity"])
                        for reward in (quest.ingredient_rewards or [])
                    ]
                    items = await self._inventory.award_items(
                        uow, user_id, QUEST_INGREDIENT_ITEM_TYPE, ingredients
                    )

                    unlocked: List[str] = []
                    if quest.cosmetic_rewards:
                        unlocked = await self._cosmetics.unlock_themes(
                            uow, user_id, quest.cosmetic_rewards
                        )

            except Exception as exc:
                self.log_error("claim_quest", exc, user_id=user_id, quest_id=quest_id)
                raise

        await self.emit_event(
            "quest.claimed",
            {
                "user_id": user_id,
                "quest_id": quest_id,
                "xp_gained": award.xp_gained,
                "items_awarded": items,
                "themes_unlocked": unlocked,
            },
        )
        if award.leveled_up:
            await self.emit_event(
                "player.leveled_up",
                {
                    "user_id": user_id,
                    "old_level": award.old_level,
                    "new_level": award.new_level,
                    "total_xp": award.total_xp,
                },
            )

        self.log.info(
            f"Quest claimed: {quest_id} (+{award.xp_gained} XP)",
            extra={
                "user_id": user_id,
                "quest_id": quest_id,
                "xp_gained": award.xp_gained,
                "new_level": award.new_level,
                "leveled_up": award.leveled_up,
            },
        )

        return {
            "success": True,
            "xp_gained": award.xp_gained,
            "level": award.new_level,
            "leveled_up": award.leveled_up,
        }

    # ========================================================================
    # INTERNAL HELPERS
    # ========================================================================

    async def _get_locked(
        self, uow: UnitOfWork, user_id: str, quest_id: str
    ) -> PlayerQuest:
        player_quest = await uow.player_quests.get_for_user(
            user_id, quest_id, for_update=True
        )
        if player_quest is None:
            raise NotFoundError("PlayerQuest", quest_id)
        return player_quest
