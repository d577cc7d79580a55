"""Data access for the quest catalog and per-player quest instances."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from alchemy.core.logging.logger import get_logger
from alchemy.database.models import PlayerQuest, Quest
from alchemy.modules.shared.base_repository import BaseRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class QuestRepository(BaseRepository[Quest]):
    """Repository for catalog quests."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Quest, get_logger(f"{__name__}.QuestRepository"))

    async def get_active(self, quest_id: str) -> Optional[Quest]:
        return await self.find_one_where(
            Quest.id == quest_id,
            Quest.is_active.is_(True),
        )


class PlayerQuestRepository(BaseRepository[PlayerQuest]):
    """
    Repository for PlayerQuest rows.

    The `quest` relationship is configured with lazy="raise", so every
    query here loads it eagerly.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            PlayerQuest,
            get_logger(f"{__name__}.PlayerQuestRepository"),
        )

    async def get_for_user(
        self,
        user_id: str,
        quest_id: str,
        for_update: bool = False,
    ) -> Optional[PlayerQuest]:
        return await self.find_one_where(
            PlayerQuest.user_id == user_id,
            PlayerQuest.quest_id == quest_id,
            eager_load=[PlayerQuest.quest],
            for_update=for_update,
        )

    async def list_for_user(self, user_id: str) -> List[PlayerQuest]:
        """All of a player's quests, oldest first."""
        return await self.find_many_where(
            PlayerQuest.user_id == user_id,
            eager_load=[PlayerQuest.quest],
            order_by=[PlayerQuest.created_at.asc(), PlayerQuest.id.asc()],
        )
