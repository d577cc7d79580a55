"""Data access for player progression state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from alchemy.core.logging.logger import get_logger
from alchemy.database.models import PlayerState
from alchemy.modules.shared.base_repository import BaseRepository
from alchemy.modules.shared.constants import MIN_PLAYER_LEVEL

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class PlayerStateRepository(BaseRepository[PlayerState]):
    """Repository for PlayerState, keyed by the external user id."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            PlayerState,
            get_logger(f"{__name__}.PlayerStateRepository"),
        )

    async def get_by_user(
        self, user_id: str, for_update: bool = False
    ) -> Optional[PlayerState]:
        return await self.find_one_where(
            PlayerState.user_id == user_id,
            for_update=for_update,
        )

    async def get_or_create_for_update(self, user_id: str) -> PlayerState:
        """
        Return the player's state locked for update, creating a level 1
        record when none exists.

        Concurrent first writers both succeed: one inserts, the other waits
        on the unique user_id and then locks the same row. The insert runs
        before the read so SQLite, which ignores FOR UPDATE, takes its write
        lock first.
        """
        created = await self.insert_if_absent(
            ["user_id"],
            user_id=user_id,
            level=MIN_PLAYER_LEVEL,
            xp=0,
            total_xp=0,
            current_streak=0,
            longest_streak=0,
        )
        if created:
            self.log.info(
                "Player state created",
                extra={"user_id": user_id},
            )

        state = await self.get_by_user(user_id, for_update=True)
        assert state is not None  # inserted above or by a concurrent writer
        return state
