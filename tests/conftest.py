"""
Pytest Configuration and Fixtures for Alchemy Tests
===================================================

Purpose
-------
Centralized fixtures for the Alchemy test suite: a real database per test,
a fresh event bus, fully wired services, seed helpers and mocks.

Architecture Notes
------------------
- Unit tests use mocks or pure functions (fast, isolated)
- Integration tests run the services against a file-backed SQLite database
  through aiosqlite; the schema is created from Base.metadata per test
- The PostgreSQL testcontainer fixtures are used only by tests marked
  `postgres`, which run when ALCHEMY_RUN_CONTAINER_TESTS=1
- Environment variables are set before any `alchemy` import because Config
  reads them at import time
"""

from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_TO_FILE", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio

from alchemy.core.config.manager import ConfigManager
from alchemy.core.database.base import utc_now
from alchemy.core.database.service import DatabaseService
from alchemy.core.event.bus import EventBus
from alchemy.core.logging.logger import get_logger
from alchemy.database.models import (
    PlayerCosmetics,
    PlayerQuest,
    PlayerState,
    Quest,
    QuestStatus,
    Reward,
    RewardPoints,
    TableSkin,
    Theme,
)
from alchemy.modules.cosmetics import CosmeticsService
from alchemy.modules.inventory import InventoryService
from alchemy.modules.progression import ProgressionService
from alchemy.modules.quests import QuestService
from alchemy.modules.rewards import RedemptionService, RewardsLedgerService
from alchemy.modules.shared.formulas import calculate_level_from_total_xp

logger = get_logger(__name__)


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def reset_config_manager():
    """Every test starts from the YAML defaults with no overrides."""
    ConfigManager.reset()
    yield
    ConfigManager.reset()


# ============================================================================
# DATABASE FIXTURES (Integration Tests)
# ============================================================================


@pytest_asyncio.fixture
async def database(tmp_path) -> AsyncGenerator[type[DatabaseService], None]:
    """
    Initialize DatabaseService against a fresh SQLite file with the full
    schema.

    Scope: function (clean slate per test)
    """
    await DatabaseService.initialize(f"sqlite+aiosqlite:///{tmp_path / 'alchemy.db'}")
    await DatabaseService.create_schema()

    yield DatabaseService

    await DatabaseService.shutdown()


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def published_events(event_bus) -> List[Dict[str, Any]]:
    """Record every event published on the test bus as {name, payload}."""
    events: List[Dict[str, Any]] = []

    def _make_recorder(name: str):
        def _record(payload):
            events.append({"name": name, "payload": payload})

        return _record

    for name in (
        "quest.claimed",
        "player.leveled_up",
        "rewards.points_added",
        "rewards.tier_changed",
        "rewards.points_deducted",
        "rewards.redeemed",
        "cosmetics.equipped",
    ):
        event_bus.subscribe(name, _make_recorder(name), identifier=f"test-recorder@{name}")
    return events


def _service_logger(cls: type):
    return get_logger(f"{cls.__module__}.{cls.__name__}")


@pytest.fixture
def progression_service(event_bus) -> ProgressionService:
    return ProgressionService(ConfigManager, event_bus, _service_logger(ProgressionService))


@pytest.fixture
def inventory_service(event_bus) -> InventoryService:
    return InventoryService(ConfigManager, event_bus, _service_logger(InventoryService))


@pytest.fixture
def cosmetics_service(event_bus) -> CosmeticsService:
    return CosmeticsService(ConfigManager, event_bus, _service_logger(CosmeticsService))


@pytest.fixture
def quest_service(
    event_bus, progression_service, inventory_service, cosmetics_service
) -> QuestService:
    return QuestService(
        ConfigManager,
        event_bus,
        _service_logger(QuestService),
        progression_service=progression_service,
        inventory_service=inventory_service,
        cosmetics_service=cosmetics_service,
    )


@pytest.fixture
def ledger_service(event_bus) -> RewardsLedgerService:
    return RewardsLedgerService(ConfigManager, event_bus, _service_logger(RewardsLedgerService))


@pytest.fixture
def redemption_service(event_bus, ledger_service) -> RedemptionService:
    return RedemptionService(
        ConfigManager,
        event_bus,
        _service_logger(RedemptionService),
        ledger_service=ledger_service,
    )


# ============================================================================
# SEED HELPERS
# ============================================================================


async def seed_player(user_id: str, total_xp: int = 0) -> None:
    async with DatabaseService.get_transaction() as session:
        session.add(
            PlayerState(
                user_id=user_id,
                level=calculate_level_from_total_xp(total_xp),
                xp=total_xp,
                total_xp=total_xp,
                current_streak=0,
                longest_streak=0,
            )
        )


async def seed_quest(
    quest_id: str,
    xp_reward: int = 100,
    ingredient_rewards: Optional[List[Dict[str, Any]]] = None,
    cosmetic_rewards: Optional[List[str]] = None,
    goal: int = 1,
    required_level: int = 1,
    is_active: bool = True,
) -> None:
    async with DatabaseService.get_transaction() as session:
        session.add(
            Quest(
                id=quest_id,
                name=f"Quest {quest_id}",
                description="Brew something",
                quest_type="daily",
                required_level=required_level,
                goal=goal,
                xp_reward=xp_reward,
                ingredient_rewards=ingredient_rewards or [],
                cosmetic_rewards=cosmetic_rewards or [],
                is_active=is_active,
            )
        )


async def seed_player_quest(
    user_id: str,
    quest_id: str,
    status: QuestStatus = QuestStatus.COMPLETED,
    progress: int = 1,
) -> None:
    now = utc_now()
    async with DatabaseService.get_transaction() as session:
        session.add(
            PlayerQuest(
                user_id=user_id,
                quest_id=quest_id,
                status=status.value,
                progress=progress,
                started_at=now if status.rank >= QuestStatus.ACTIVE.rank else None,
                completed_at=now if status.rank >= QuestStatus.COMPLETED.rank else None,
                claimed_at=now if status is QuestStatus.CLAIMED else None,
            )
        )


async def seed_reward(
    reward_id: str,
    points_cost: int,
    minimum_tier: str = "Novice",
    stock: Optional[int] = None,
    is_active: bool = True,
    name: Optional[str] = None,
) -> None:
    async with DatabaseService.get_transaction() as session:
        session.add(
            Reward(
                id=reward_id,
                name=name or f"Reward {reward_id}",
                description="A discount",
                points_cost=points_cost,
                discount_type="percentage",
                discount_value=10.0,
                product_id=None,
                minimum_tier=minimum_tier,
                is_active=is_active,
                stock=stock,
            )
        )


async def seed_ledger(user_id: str, balance: int, lifetime_earned: int, tier: str) -> None:
    async with DatabaseService.get_transaction() as session:
        session.add(
            RewardPoints(
                user_id=user_id,
                balance=balance,
                lifetime_earned=lifetime_earned,
                tier=tier,
                tier_updated_at=utc_now(),
            )
        )


async def seed_theme(theme_id: str, required_level: int = 1, is_active: bool = True) -> None:
    async with DatabaseService.get_transaction() as session:
        session.add(
            Theme(
                id=theme_id,
                name=f"Theme {theme_id}",
                required_level=required_level,
                is_active=is_active,
            )
        )


async def seed_table_skin(
    skin_id: str, theme_id: str, required_level: int = 1, is_active: bool = True
) -> None:
    async with DatabaseService.get_transaction() as session:
        session.add(
            TableSkin(
                id=skin_id,
                theme_id=theme_id,
                name=f"Skin {skin_id}",
                required_level=required_level,
                is_active=is_active,
            )
        )


async def seed_cosmetics(
    user_id: str,
    unlocked_themes: Optional[List[str]] = None,
    unlocked_skins: Optional[List[str]] = None,
) -> None:
    async with DatabaseService.get_transaction() as session:
        session.add(
            PlayerCosmetics(
                user_id=user_id,
                unlocked_themes=unlocked_themes or [],
                unlocked_skins=unlocked_skins or [],
            )
        )


# ============================================================================
# MOCK FIXTURES (Unit Tests)
# ============================================================================


@pytest.fixture
def mock_event_bus(mocker):
    """
    Mock EventBus for unit tests.

    Scope: function
    """
    mock_bus = mocker.MagicMock()
    mock_bus.publish = mocker.AsyncMock()
    mock_bus.subscribe = mocker.MagicMock()
    return mock_bus


@pytest.fixture
def mock_config_manager(mocker):
    """
    Mock ConfigManager returning the caller's default for every key.

    Scope: function
    """
    mock_config = mocker.MagicMock()
    mock_config.get = mocker.MagicMock(side_effect=lambda key, default=None: default)
    return mock_config
