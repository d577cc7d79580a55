"""Data access for unlocked cosmetics and the theme and table skin catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from alchemy.core.logging.logger import get_logger
from alchemy.database.models import PlayerCosmetics, TableSkin, Theme
from alchemy.modules.shared.base_repository import BaseRepository

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class CosmeticsRepository(BaseRepository[PlayerCosmetics]):
    def __init__(self, session: AsyncSession) -> None:
        super().__init__(
            session,
            PlayerCosmetics,
            get_logger(f"{__name__}.CosmeticsRepository"),
        )

    async def get_by_user(
        self, user_id: str, for_update: bool = False
    ) -> Optional[PlayerCosmetics]:
        return await self.find_one_where(
            PlayerCosmetics.user_id == user_id,
            for_update=for_update,
        )

    async def get_or_create_for_update(self, user_id: str) -> PlayerCosmetics:
        await self.insert_if_absent(
            ["user_id"],
            user_id=user_id,
            unlocked_themes=[],
            unlocked_skins=[],
        )
        cosmetics = await self.get_by_user(user_id, for_update=True)
        assert cosmetics is not None  # inserted above or by a concurrent writer
        return cosmetics


class ThemeRepository(BaseRepository[Theme]):
    """Theme catalog."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Theme, get_logger(f"{__name__}.ThemeRepository"))

    async def list_active(self) -> List[Theme]:
        return await self.find_many_where(
            Theme.is_active.is_(True),
            order_by=[Theme.required_level.asc(), Theme.name.asc()],
        )


class TableSkinRepository(BaseRepository[TableSkin]):
    """Table skin catalog, grouped by theme."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, TableSkin, get_logger(f"{__name__}.TableSkinRepository"))

    async def list_active_for_theme(self, theme_id: str) -> List[TableSkin]:
        return await self.find_many_where(
            TableSkin.theme_id == theme_id,
            TableSkin.is_active.is_(True),
            order_by=[TableSkin.required_level.asc(), TableSkin.name.asc()],
        )
