"""
Integration tests for CosmeticsService catalog reads and equipping.

Tests the unlocked-or-level rule for themes and table skins, the unlock
that accompanies a level-only equip, and the not-found guards.
"""

import pytest

from alchemy.core.services.error_response_service import ErrorResponseService
from alchemy.modules.shared.exceptions import CosmeticLockedError, NotFoundError
from tests.conftest import (
    seed_cosmetics,
    seed_player,
    seed_table_skin,
    seed_theme,
)

USER_ID = "player-1"
LEVEL_THREE_XP = 801


@pytest.mark.integration
@pytest.mark.database
class TestCosmeticCatalog:
    """Test get_themes and get_theme_skins."""

    async def test_themes_ordered_by_required_level(self, database, cosmetics_service):
        """Only active themes are listed, lowest level first."""
        await seed_theme("nebula", required_level=10)
        await seed_theme("classic", required_level=1)
        await seed_theme("retired", is_active=False)

        themes = await cosmetics_service.get_themes()

        assert [theme["id"] for theme in themes] == ["classic", "nebula"]
        assert themes[1]["required_level"] == 10

    async def test_skins_for_theme(self, database, cosmetics_service):
        """Skins of one theme are listed, inactive ones skipped."""
        await seed_theme("classic")
        await seed_theme("nebula")
        await seed_table_skin("oak", "classic", required_level=2)
        await seed_table_skin("felt", "classic", required_level=1)
        await seed_table_skin("old-oak", "classic", is_active=False)
        await seed_table_skin("stardust", "nebula")

        skins = await cosmetics_service.get_theme_skins("classic")

        assert [skin["id"] for skin in skins] == ["felt", "oak"]
        assert all(skin["theme_id"] == "classic" for skin in skins)

    @pytest.mark.parametrize("theme_id,seed", [("missing", False), ("retired", True)])
    async def test_skins_for_unknown_or_inactive_theme(
        self, database, cosmetics_service, theme_id, seed
    ):
        if seed:
            await seed_theme(theme_id, is_active=False)

        with pytest.raises(NotFoundError):
            await cosmetics_service.get_theme_skins(theme_id)


@pytest.mark.integration
@pytest.mark.database
class TestSetTheme:
    """Test set_theme."""

    async def test_equip_unlocked_theme(self, database, cosmetics_service, published_events):
        """An unlocked theme is equipped regardless of level."""
        # Arrange
        await seed_player(USER_ID, total_xp=0)
        await seed_theme("starlight", required_level=20)
        await seed_cosmetics(USER_ID, unlocked_themes=["starlight"])

        # Act
        result = await cosmetics_service.set_theme(USER_ID, "starlight")

        # Assert
        assert result["active_theme_id"] == "starlight"
        assert result["unlocked_themes"] == ["starlight"]
        assert published_events[-1] == {
            "name": "cosmetics.equipped",
            "payload": {
                "user_id": USER_ID,
                "slot": "theme",
                "cosmetic_id": "starlight",
                "newly_unlocked": False,
            },
        }

    async def test_level_alone_equips_and_unlocks(self, database, cosmetics_service):
        """Meeting the level requirement equips the theme and adds it to the unlocked list."""
        # Arrange
        await seed_player(USER_ID, total_xp=LEVEL_THREE_XP)
        await seed_theme("ember", required_level=3)
        await seed_cosmetics(USER_ID, unlocked_themes=["starlight"])

        # Act
        await cosmetics_service.set_theme(USER_ID, "ember")

        # Assert
        cosmetics = await cosmetics_service.get_cosmetics(USER_ID)
        assert cosmetics["active_theme_id"] == "ember"
        assert cosmetics["unlocked_themes"] == ["starlight", "ember"]

    async def test_locked_theme_rejected(self, database, cosmetics_service):
        """Below the required level and not unlocked: rejected, nothing changes."""
        # Arrange
        await seed_player(USER_ID, total_xp=0)
        await seed_theme("nebula", required_level=10)
        await seed_cosmetics(USER_ID)

        # Act
        with pytest.raises(CosmeticLockedError) as exc_info:
            await cosmetics_service.set_theme(USER_ID, "nebula")

        # Assert
        assert exc_info.value.required_level == 10
        assert exc_info.value.current_level == 1
        assert ErrorResponseService().format_error(exc_info.value)["status_code"] == 403
        cosmetics = await cosmetics_service.get_cosmetics(USER_ID)
        assert cosmetics["active_theme_id"] is None
        assert cosmetics["unlocked_themes"] == []

    async def test_missing_player_state(self, database, cosmetics_service):
        await seed_theme("classic")
        await seed_cosmetics(USER_ID)

        with pytest.raises(NotFoundError) as exc_info:
            await cosmetics_service.set_theme(USER_ID, "classic")

        assert exc_info.value.details["resource_type"] == "PlayerState"

    async def test_missing_cosmetics_record(self, database, cosmetics_service):
        await seed_player(USER_ID)
        await seed_theme("classic")

        with pytest.raises(NotFoundError) as exc_info:
            await cosmetics_service.set_theme(USER_ID, "classic")

        assert exc_info.value.details["resource_type"] == "PlayerCosmetics"

    async def test_inactive_theme_not_found(self, database, cosmetics_service):
        """An inactive theme cannot be equipped even if unlocked."""
        await seed_player(USER_ID)
        await seed_theme("retired", is_active=False)
        await seed_cosmetics(USER_ID, unlocked_themes=["retired"])

        with pytest.raises(NotFoundError):
            await cosmetics_service.set_theme(USER_ID, "retired")


@pytest.mark.integration
@pytest.mark.database
class TestSetTableSkin:
    """Test set_table_skin."""

    async def test_level_alone_equips_and_unlocks_skin(
        self, database, cosmetics_service, published_events
    ):
        # Arrange
        await seed_player(USER_ID, total_xp=LEVEL_THREE_XP)
        await seed_theme("classic")
        await seed_table_skin("oak", "classic", required_level=2)
        await seed_cosmetics(USER_ID)

        # Act
        result = await cosmetics_service.set_table_skin(USER_ID, "oak")

        # Assert
        assert result["active_table_skin_id"] == "oak"
        assert result["unlocked_skins"] == ["oak"]
        assert result["active_theme_id"] is None
        assert published_events[-1]["payload"]["slot"] == "table_skin"
        assert published_events[-1]["payload"]["newly_unlocked"] is True

    async def test_unlocked_skin_equipped_without_duplicate(self, database, cosmetics_service):
        await seed_player(USER_ID)
        await seed_theme("classic")
        await seed_table_skin("marble", "classic", required_level=50)
        await seed_cosmetics(USER_ID, unlocked_skins=["marble"])

        result = await cosmetics_service.set_table_skin(USER_ID, "marble")

        assert result["unlocked_skins"] == ["marble"]
        assert result["active_table_skin_id"] == "marble"

    async def test_locked_skin_rejected(self, database, cosmetics_service):
        """The error names the slot and the level needed."""
        await seed_player(USER_ID)
        await seed_theme("classic")
        await seed_table_skin("marble", "classic", required_level=50)
        await seed_cosmetics(USER_ID)

        with pytest.raises(CosmeticLockedError) as exc_info:
            await cosmetics_service.set_table_skin(USER_ID, "marble")

        assert exc_info.value.message == "Table skin not unlocked. Required level: 50"

    async def test_unknown_skin(self, database, cosmetics_service):
        await seed_player(USER_ID)
        await seed_cosmetics(USER_ID)

        with pytest.raises(NotFoundError):
            await cosmetics_service.set_table_skin(USER_ID, "missing")
