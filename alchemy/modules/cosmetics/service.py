"""
Cosmetics Service
=================

Purpose
-------
Track which cosmetic themes and table skins a player has unlocked, and which
ones are equipped. Unlocks are a set union: existing entries keep their
order, new ones are appended once, and nothing is ever removed.

Equipping
---------
A theme or table skin can be equipped when it is already in the player's
unlocked list or the player's level reaches its `required_level`. Equipping
by level alone also unlocks it, so it stays usable if the catalog's level
gate is raised later.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Union

from sqlalchemy.orm.attributes import flag_modified

from alchemy.core.logging.logger import LogContext
from alchemy.core.validation.input_validator import InputValidator
from alchemy.modules.shared.base_service import BaseService
from alchemy.modules.shared.exceptions import CosmeticLockedError, NotFoundError

if TYPE_CHECKING:
    from alchemy.database.models import PlayerCosmetics, TableSkin, Theme
    from alchemy.modules.shared.unit_of_work import UnitOfWork

THEME = "theme"
TABLE_SKIN = "table_skin"

# slot -> (unlocked list attribute, active id attribute)
_SLOTS = {
    THEME: ("unlocked_themes", "active_theme_id"),
    TABLE_SKIN: ("unlocked_skins", "active_table_skin_id"),
}


def _cosmetics_view(user_id: str, cosmetics: PlayerCosmetics) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "unlocked_themes": list(cosmetics.unlocked_themes or []),
        "unlocked_skins": list(cosmetics.unlocked_skins or []),
        "active_theme_id": cosmetics.active_theme_id,
        "active_table_skin_id": cosmetics.active_table_skin_id,
    }


def _theme_view(theme: Theme) -> Dict[str, Any]:
    return {
        "id": theme.id,
        "name": theme.name,
        "description": theme.description,
        "required_level": theme.required_level,
    }


def _skin_view(skin: TableSkin) -> Dict[str, Any]:
    return {
        "id": skin.id,
        "theme_id": skin.theme_id,
        "name": skin.name,
        "asset_url": skin.asset_url,
        "required_level": skin.required_level,
    }


class CosmeticsService(BaseService):
    """
    Service for unlocked and equipped cosmetics.

    Public Methods
    --------------
    - get_cosmetics() -> Unlocked lists and equipped ids
    - get_themes() / get_theme_skins() -> Active catalog entries by level
    - set_theme() / set_table_skin() -> Equip an unlocked or level-eligible entry
    - unlock_themes() -> Union themes inside a caller's unit of work
    """

    async def get_cosmetics(self, user_id: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If the player has never unlocked anything
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")

        async with self.read_only_unit_of_work() as uow:
            cosmetics = await uow.cosmetics.get_by_user(user_id)
            if cosmetics is None:
                raise NotFoundError("PlayerCosmetics", user_id)
            return _cosmetics_view(user_id, cosmetics)

    async def get_themes(self) -> List[Dict[str, Any]]:
        """Active themes, lowest required level first."""
        async with self.read_only_unit_of_work() as uow:
            return [_theme_view(theme) for theme in await uow.themes.list_active()]

    async def get_theme_skins(self, theme_id: str) -> List[Dict[str, Any]]:
        """
        Active table skins of one theme, lowest required level first.

        Raises:
            NotFoundError: If the theme does not exist or is inactive
        """
        theme_id = InputValidator.validate_identifier(theme_id, "theme_id")

        async with self.read_only_unit_of_work() as uow:
            theme = await uow.themes.get(theme_id)
            if theme is None or not theme.is_active:
                raise NotFoundError("Theme", theme_id)
            skins = await uow.table_skins.list_active_for_theme(theme_id)
            return [_skin_view(skin) for skin in skins]

    async def set_theme(self, user_id: str, theme_id: str) -> Dict[str, Any]:
        """
        Equip a theme.

        Raises:
            NotFoundError: If the player has no state or cosmetics record,
                or the theme does not exist or is inactive
            CosmeticLockedError: If the theme is neither unlocked nor within
                the player's level
        """
        return await self._equip(user_id, THEME, theme_id)

    async def set_table_skin(self, user_id: str, skin_id: str) -> Dict[str, Any]:
        """
        Equip a table skin. Same rules and errors as `set_theme`.
        """
        return await self._equip(user_id, TABLE_SKIN, skin_id)

    async def unlock_themes(
        self, uow: UnitOfWork, user_id: str, theme_ids: Iterable[str]
    ) -> List[str]:
        """
        Union theme ids into the player's unlocked themes inside the
        caller's unit of work, creating the record if missing.

        Returns:
            The theme ids that were newly unlocked
        """
        cosmetics = await uow.cosmetics.get_or_create_for_update(user_id)

        current = list(cosmetics.unlocked_themes or [])
        newly_unlocked: List[str] = []
        for theme_id in theme_ids:
            if theme_id not in current and theme_id not in newly_unlocked:
                newly_unlocked.append(theme_id)

        if newly_unlocked:
            cosmetics.unlocked_themes = current + newly_unlocked
            flag_modified(cosmetics, "unlocked_themes")

        return newly_unlocked

    async def _equip(self, user_id: str, slot: str, cosmetic_id: str) -> Dict[str, Any]:
        user_id = InputValidator.validate_identifier(user_id, "user_id")
        cosmetic_id = InputValidator.validate_identifier(cosmetic_id, f"{slot}_id")
        unlocked_attr, active_attr = _SLOTS[slot]
        operation = f"set_{slot}"

        with LogContext(user_id=user_id, operation=operation):
            self.log_operation(operation, user_id=user_id, cosmetic_id=cosmetic_id)

            try:
                async with self.unit_of_work() as uow:
                    state = await uow.players.get_by_user(user_id)
                    if state is None:
                        raise NotFoundError("PlayerState", user_id)

                    cosmetics = await uow.cosmetics.get_by_user(user_id, for_update=True)
                    if cosmetics is None:
                        raise NotFoundError("PlayerCosmetics", user_id)

                    entry = await self._get_catalog_entry(uow, slot, cosmetic_id)

                    unlocked = list(getattr(cosmetics, unlocked_attr) or [])
                    has_unlocked = cosmetic_id in unlocked
                    if not has_unlocked and state.level < entry.required_level:
                        raise CosmeticLockedError(
                            slot, cosmetic_id, entry.required_level, state.level
                        )

                    setattr(cosmetics, active_attr, cosmetic_id)
                    if not has_unlocked:
                        setattr(cosmetics, unlocked_attr, unlocked + [cosmetic_id])
                        flag_modified(cosmetics, unlocked_attr)

                    result = _cosmetics_view(user_id, cosmetics)
            except Exception as exc:
                self.log_error(operation, exc, user_id=user_id, cosmetic_id=cosmetic_id)
                raise

        await self.emit_event(
            "cosmetics.equipped",
            {
                "user_id": user_id,
                "slot": slot,
                "cosmetic_id": cosmetic_id,
                "newly_unlocked": not has_unlocked,
            },
        )

        return result

    @staticmethod
    async def _get_catalog_entry(
        uow: UnitOfWork, slot: str, cosmetic_id: str
    ) -> Union[Theme, TableSkin]:
        entry: Optional[Union[Theme, TableSkin]]
        if slot == THEME:
            entry = await uow.themes.get(cosmetic_id)
            resource = "Theme"
        else:
            entry = await uow.table_skins.get(cosmetic_id)
            resource = "TableSkin"

        if entry is None or not entry.is_active:
            raise NotFoundError(resource, cosmetic_id)
        return entry
