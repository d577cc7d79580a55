"""
Integration tests for QuestService.

Tests the quest lifecycle and the atomic, exactly-once reward claim against
a real database.
"""

import asyncio

import pytest

from alchemy.database.models import QuestStatus
from alchemy.modules.shared.exceptions import (
    AlreadyClaimedError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tests.conftest import seed_player, seed_player_quest, seed_quest

USER_ID = "player-1"


@pytest.mark.integration
@pytest.mark.database
class TestClaimQuest:
    """Test claim_quest."""

    async def test_claim_awards_xp_and_levels_up(
        self, database, quest_service, progression_service, published_events
    ):
        """800 XP plus a 100 XP quest crosses the 801 threshold into level 3."""
        # Arrange
        await seed_player(USER_ID, total_xp=800)
        await seed_quest("brew-1", xp_reward=100)
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.COMPLETED)

        # Act
        result = await quest_service.claim_quest(USER_ID, "brew-1")

        # Assert
        assert result == {"success": True, "xp_gained": 100, "level": 3, "leveled_up": True}
        progress = await progression_service.get_progress(USER_ID)
        assert progress["total_xp"] == 900
        assert progress["level"] == 3

        names = [event["name"] for event in published_events]
        assert names == ["quest.claimed", "player.leveled_up"]
        assert published_events[1]["payload"] == {
            "user_id": USER_ID,
            "old_level": 2,
            "new_level": 3,
            "total_xp": 900,
        }

    async def test_second_claim_is_rejected_without_reapplying(
        self, database, quest_service, progression_service, published_events
    ):
        """A repeated claim raises AlreadyClaimed and leaves XP untouched."""
        # Arrange
        await seed_player(USER_ID, total_xp=800)
        await seed_quest("brew-1", xp_reward=100)
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.COMPLETED)
        await quest_service.claim_quest(USER_ID, "brew-1")

        # Act / Assert
        with pytest.raises(AlreadyClaimedError):
            await quest_service.claim_quest(USER_ID, "brew-1")

        progress = await progression_service.get_progress(USER_ID)
        assert progress["total_xp"] == 900
        assert [e["name"] for e in published_events].count("quest.claimed") == 1

    async def test_claim_without_level_up(self, database, quest_service, published_events):
        """Small rewards report leveled_up False and emit no level event."""
        await seed_player(USER_ID, total_xp=0)
        await seed_quest("brew-1", xp_reward=50)
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.COMPLETED)

        result = await quest_service.claim_quest(USER_ID, "brew-1")

        assert result["level"] == 1
        assert result["leveled_up"] is False
        assert [e["name"] for e in published_events] == ["quest.claimed"]

    async def test_claim_seeded_as_claimed_is_rejected(self, database, quest_service):
        """A quest already in claimed status cannot be claimed."""
        await seed_player(USER_ID)
        await seed_quest("brew-1")
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.CLAIMED)

        with pytest.raises(AlreadyClaimedError):
            await quest_service.claim_quest(USER_ID, "brew-1")

    @pytest.mark.parametrize("status", [QuestStatus.AVAILABLE, QuestStatus.ACTIVE])
    async def test_claim_unfinished_quest_fails(self, database, quest_service, status):
        """Only completed quests can be claimed."""
        await seed_player(USER_ID)
        await seed_quest("brew-1")
        await seed_player_quest(USER_ID, "brew-1", status, progress=0)

        with pytest.raises(InvalidStateError) as exc_info:
            await quest_service.claim_quest(USER_ID, "brew-1")

        assert exc_info.value.reason == "not completed"

    async def test_claim_unknown_quest_fails(self, database, quest_service):
        """Claiming a quest the player does not have is NotFound."""
        with pytest.raises(NotFoundError):
            await quest_service.claim_quest(USER_ID, "missing-quest")

    async def test_claim_rejects_malformed_ids(self, database, quest_service):
        """Ids with spaces fail validation before any query."""
        with pytest.raises(ValidationError):
            await quest_service.claim_quest("player 1", "brew-1")

    async def test_claim_awards_ingredients_and_themes(
        self, database, quest_service, inventory_service, cosmetics_service
    ):
        """Ingredients stack onto existing inventory and themes are unioned."""
        # Arrange
        await seed_player(USER_ID)
        await seed_quest(
            "brew-1",
            ingredient_rewards=[{"ingredient_id": "moonpetal", "quantity": 2}],
            cosmetic_rewards=["starlight"],
        )
        await seed_quest(
            "brew-2",
            ingredient_rewards=[
                {"ingredient_id": "moonpetal", "quantity": 3},
                {"ingredient_id": "emberroot", "quantity": 1},
            ],
            cosmetic_rewards=["starlight", "ember"],
        )
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.COMPLETED)
        await seed_player_quest(USER_ID, "brew-2", QuestStatus.COMPLETED)

        # Act
        await quest_service.claim_quest(USER_ID, "brew-1")
        await quest_service.claim_quest(USER_ID, "brew-2")

        # Assert
        inventory = {item["item_id"]: item for item in await inventory_service.get_inventory(USER_ID)}
        assert inventory["moonpetal"]["quantity"] == 5
        assert inventory["emberroot"]["quantity"] == 1
        assert inventory["moonpetal"]["item_type"] == "ingredient"

        cosmetics = await cosmetics_service.get_cosmetics(USER_ID)
        assert cosmetics["unlocked_themes"] == ["starlight", "ember"]

    async def test_claim_event_lists_awards(self, database, quest_service, published_events):
        """The quest.claimed payload carries items and newly unlocked themes."""
        await seed_player(USER_ID)
        await seed_quest(
            "brew-1",
            xp_reward=25,
            ingredient_rewards=[{"ingredient_id": "moonpetal", "quantity": 2}],
            cosmetic_rewards=["starlight"],
        )
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.COMPLETED)

        await quest_service.claim_quest(USER_ID, "brew-1")

        assert published_events[0]["payload"] == {
            "user_id": USER_ID,
            "quest_id": "brew-1",
            "xp_gained": 25,
            "items_awarded": {"moonpetal": 2},
            "themes_unlocked": ["starlight"],
        }

    async def test_failure_mid_claim_rolls_everything_back(
        self,
        database,
        mocker,
        quest_service,
        cosmetics_service,
        progression_service,
        inventory_service,
        published_events,
    ):
        """If unlocking themes fails, XP, inventory and claim status are untouched."""
        # Arrange
        await seed_player(USER_ID, total_xp=800)
        await seed_quest(
            "brew-1",
            xp_reward=100,
            ingredient_rewards=[{"ingredient_id": "moonpetal", "quantity": 2}],
            cosmetic_rewards=["starlight"],
        )
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.COMPLETED)
        mocker.patch.object(
            cosmetics_service, "unlock_themes", side_effect=RuntimeError("cosmetics down")
        )

        # Act
        with pytest.raises(RuntimeError):
            await quest_service.claim_quest(USER_ID, "brew-1")

        # Assert
        progress = await progression_service.get_progress(USER_ID)
        assert progress["total_xp"] == 800
        assert progress["level"] == 2
        assert await inventory_service.get_inventory(USER_ID) == []
        quests = await quest_service.get_quests(USER_ID)
        assert quests[0]["status"] == "completed"
        assert quests[0]["claimed_at"] is None
        assert published_events == []

    async def test_claim_creates_missing_player_state(
        self, database, quest_service, progression_service
    ):
        """A claim for a player without progression state starts them at level 1."""
        await seed_quest("brew-1", xp_reward=300)
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.COMPLETED)

        await quest_service.claim_quest(USER_ID, "brew-1")

        progress = await progression_service.get_progress(USER_ID)
        assert progress["total_xp"] == 300
        assert progress["level"] == 2


@pytest.mark.integration
@pytest.mark.database
class TestQuestLifecycle:
    """Test make_available, start_quest and record_progress."""

    async def test_full_lifecycle(self, database, quest_service):
        """available -> active -> completed -> claimed."""
        # Arrange
        await seed_quest("gather-3", goal=3, xp_reward=10)

        # Act
        offered = await quest_service.make_available(USER_ID, "gather-3")
        started = await quest_service.start_quest(USER_ID, "gather-3")
        partial = await quest_service.record_progress(USER_ID, "gather-3", 2)
        finished = await quest_service.record_progress(USER_ID, "gather-3", 5)
        claim = await quest_service.claim_quest(USER_ID, "gather-3")

        # Assert
        assert offered["status"] == "available"
        assert started["status"] == "active"
        assert started["started_at"] is not None
        assert partial["status"] == "active"
        assert partial["progress"] == 2
        assert finished["status"] == "completed"
        assert finished["progress"] == 3
        assert finished["completed_at"] is not None
        assert claim["xp_gained"] == 10

    async def test_make_available_is_idempotent(self, database, quest_service):
        """Offering the same quest twice returns the existing instance."""
        await seed_quest("brew-1")

        first = await quest_service.make_available(USER_ID, "brew-1")
        second = await quest_service.make_available(USER_ID, "brew-1")

        assert first["id"] == second["id"]
        assert len(await quest_service.get_quests(USER_ID)) == 1

    async def test_parallel_make_available_creates_one_instance(self, database, quest_service):
        """Racing offers of a new quest to a new player both succeed."""
        await seed_quest("brew-1")

        first, second = await asyncio.gather(
            quest_service.make_available(USER_ID, "brew-1"),
            quest_service.make_available(USER_ID, "brew-1"),
        )

        assert first["id"] == second["id"]
        assert first["status"] == second["status"] == "available"
        assert len(await quest_service.get_quests(USER_ID)) == 1

    async def test_make_available_enforces_required_level(self, database, quest_service):
        """Quests above the player's level cannot be offered."""
        await seed_player(USER_ID, total_xp=0)
        await seed_quest("elixir-master", required_level=5)

        with pytest.raises(InvalidStateError):
            await quest_service.make_available(USER_ID, "elixir-master")

    async def test_make_available_ignores_inactive_quests(self, database, quest_service):
        """Inactive catalog quests are NotFound."""
        await seed_quest("retired", is_active=False)

        with pytest.raises(NotFoundError):
            await quest_service.make_available(USER_ID, "retired")

    async def test_start_twice_fails(self, database, quest_service):
        """Only available quests can be started."""
        await seed_quest("brew-1")
        await quest_service.make_available(USER_ID, "brew-1")
        await quest_service.start_quest(USER_ID, "brew-1")

        with pytest.raises(InvalidStateError):
            await quest_service.start_quest(USER_ID, "brew-1")

    async def test_progress_requires_active_quest(self, database, quest_service):
        """Progress on an available quest is rejected."""
        await seed_quest("brew-1")
        await quest_service.make_available(USER_ID, "brew-1")

        with pytest.raises(InvalidStateError):
            await quest_service.record_progress(USER_ID, "brew-1")

    async def test_progress_amount_must_be_positive(self, database, quest_service):
        """Zero progress is a validation error."""
        with pytest.raises(ValidationError):
            await quest_service.record_progress(USER_ID, "brew-1", 0)

    async def test_get_quests_requires_player_state(self, database, quest_service):
        """Listing quests for an unknown player is NotFound."""
        with pytest.raises(NotFoundError):
            await quest_service.get_quests("nobody")

    async def test_get_quests_returns_quest_details(self, database, quest_service):
        """Each entry joins catalog fields with the player's status."""
        await seed_player(USER_ID)
        await seed_quest("brew-1", xp_reward=40, goal=2)
        await seed_player_quest(USER_ID, "brew-1", QuestStatus.ACTIVE, progress=1)

        quests = await quest_service.get_quests(USER_ID)

        assert len(quests) == 1
        assert quests[0]["quest_id"] == "brew-1"
        assert quests[0]["xp_reward"] == 40
        assert quests[0]["goal"] == 2
        assert quests[0]["progress"] == 1
        assert quests[0]["status"] == "active"
