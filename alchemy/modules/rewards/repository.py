"""
Rewards Repositories

Data access for the loyalty ledger (`RewardPoints`), its append-only
history (`RewardHistoryEntry`) and the redeemable catalog (`Reward`).

Ledger and catalog rows are read with SELECT ... FOR UPDATE whenever the
caller is about to change them, so balance and stock checks are evaluated
on locked rows inside the same transaction as the writes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import or_

from alchemy.core.database.base import utc_now
from alchemy.core.logging.logger import get_logger
from alchemy.database.models import Reward, RewardHistoryEntry, RewardPoints
from alchemy.modules.shared.base_repository import BaseRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class RewardPointsRepository(BaseRepository[RewardPoints]):
    """Repository for a player's points ledger (one row per user)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            RewardPoints,
            get_logger(f"{__name__}.RewardPointsRepository"),
        )

    async def get_by_user(
        self, user_id: str, for_update: bool = False
    ) -> Optional[RewardPoints]:
        return await self.find_one_where(
            RewardPoints.user_id == user_id,
            for_update=for_update,
        )

    async def get_or_create_for_update(
        self, user_id: str, initial_tier: str
    ) -> RewardPoints:
        """
        Return the ledger locked for update, creating an empty one on first
        touch.

        Insert-then-lock: a concurrent first writer inserts nothing and
        locks the winner's row. Issuing the insert first also serializes
        writers on SQLite, where FOR UPDATE is a no-op.
        """
        created = await self.insert_if_absent(
            ["user_id"],
            user_id=user_id,
            balance=0,
            lifetime_earned=0,
            tier=initial_tier,
            tier_updated_at=utc_now(),
        )
        if created:
            self.log.info(
                "Reward points ledger created",
                extra={"user_id": user_id, "tier": initial_tier},
            )

        ledger = await self.get_by_user(user_id, for_update=True)
        assert ledger is not None  # inserted above or by a concurrent writer
        return ledger


class RewardHistoryRepository(BaseRepository[RewardHistoryEntry]):
    """Append-only ledger history."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            RewardHistoryEntry,
            get_logger(f"{__name__}.RewardHistoryRepository"),
        )

    def append(
        self,
        user_id: str,
        entry_type: str,
        points: int,
        description: str,
        order_id: Optional[str] = None,
    ) -> RewardHistoryEntry:
        entry = RewardHistoryEntry(
            user_id=user_id,
            type=entry_type,
            points=points,
            description=description,
            order_id=order_id,
            created_at=utc_now(),
        )
        return self.add(entry)

    async def list_page(
        self, user_id: str, page: int, per_page: int
    ) -> List[RewardHistoryEntry]:
        """Newest first; ties broken by id for stable paging."""
        return await self.find_many_where(
            RewardHistoryEntry.user_id == user_id,
            order_by=[RewardHistoryEntry.created_at.desc(), RewardHistoryEntry.id.desc()],
            limit=per_page,
            offset=(page - 1) * per_page,
        )

    async def count_for_user(self, user_id: str) -> int:
        return await self.count(RewardHistoryEntry.user_id == user_id)


class RewardCatalogRepository(BaseRepository[Reward]):
    """Repository for redeemable catalog rewards."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            Reward,
            get_logger(f"{__name__}.RewardCatalogRepository"),
        )

    async def list_available(self) -> List[Reward]:
        """Active rewards that are unlimited or still in stock, cheapest first."""
        return await self.find_many_where(
            Reward.is_active.is_(True),
            or_(Reward.stock.is_(None), Reward.stock > 0),
            order_by=[Reward.points_cost.asc(), Reward.name.asc()],
        )
