"""Data access for player inventory rows."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from alchemy.core.logging.logger import get_logger
from alchemy.database.models import InventoryItem
from alchemy.modules.shared.base_repository import BaseRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class InventoryRepository(BaseRepository[InventoryItem]):
    """Repository for InventoryItem, unique per (user_id, item_id)."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            InventoryItem,
            get_logger(f"{__name__}.InventoryRepository"),
        )

    async def get_item_for_update(
        self, user_id: str, item_id: str
    ) -> Optional[InventoryItem]:
        return await self.find_one_where(
            InventoryItem.user_id == user_id,
            InventoryItem.item_id == item_id,
            for_update=True,
        )

    async def get_or_create_item_for_update(
        self, user_id: str, item_id: str, item_type: str
    ) -> InventoryItem:
        """Locked row for (user_id, item_id), created at quantity 0 if missing."""
        item = await self.get_item_for_update(user_id, item_id)
        if item is not None:
            return item

        await self.insert_if_absent(
            ["user_id", "item_id"],
            user_id=user_id,
            item_id=item_id,
            item_type=item_type,
            quantity=0,
        )
        item = await self.get_item_for_update(user_id, item_id)
        assert item is not None  # inserted above or by a concurrent writer
        return item

    async def list_for_user(self, user_id: str) -> List[InventoryItem]:
        """Items ordered by item_type ascending, newest first within a type."""
        return await self.find_many_where(
            InventoryItem.user_id == user_id,
            order_by=[
                InventoryItem.item_type.asc(),
                InventoryItem.created_at.desc(),
                InventoryItem.id.asc(),
            ],
        )
