"""
Unit of Work

Purpose
-------
Group every repository a service operation touches behind one database
session, so the whole operation commits or rolls back as a single
transaction.

Design Notes
------------
- `transactional_unit_of_work()` wraps `DatabaseService.get_transaction()`:
  commit on normal exit, rollback on any exception (which is re-raised).
- `read_only_unit_of_work()` wraps `DatabaseService.get_session()` and never
  commits.
- Services receive these factories through their constructor so tests can
  substitute their own.

Usage
-----
    async with transactional_unit_of_work() as uow:
        ledger = await uow.points.get_or_create_for_update(user_id, "Novice")
        ledger.balance += 100
        uow.history.append(user_id, "earned", 100, "Order #42")
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncContextManager, AsyncIterator, Callable

from alchemy.core.database.service import DatabaseService
from alchemy.modules.cosmetics.repository import (
    CosmeticsRepository,
    TableSkinRepository,
    ThemeRepository,
)
from alchemy.modules.inventory.repository import InventoryRepository
from alchemy.modules.progression.repository import PlayerStateRepository
from alchemy.modules.quests.repository import PlayerQuestRepository, QuestRepository
from alchemy.modules.rewards.repository import (
    RewardCatalogRepository,
    RewardHistoryRepository,
    RewardPointsRepository,
)

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


class UnitOfWork:
    """One transaction and the repositories bound to it."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

        self.players = PlayerStateRepository(session)
        self.quests = QuestRepository(session)
        self.player_quests = PlayerQuestRepository(session)
        self.inventory = InventoryRepository(session)
        self.cosmetics = CosmeticsRepository(session)
        self.themes = ThemeRepository(session)
        self.table_skins = TableSkinRepository(session)
        self.points = RewardPointsRepository(session)
        self.history = RewardHistoryRepository(session)
        self.catalog = RewardCatalogRepository(session)

    async def flush(self) -> None:
        await self.session.flush()


UnitOfWorkFactory = Callable[[], AsyncContextManager[UnitOfWork]]


@asynccontextmanager
async def transactional_unit_of_work() -> AsyncIterator[UnitOfWork]:
    async with DatabaseService.get_transaction() as session:
        yield UnitOfWork(session)


@asynccontextmanager
async def read_only_unit_of_work() -> AsyncIterator[UnitOfWork]:
    async with DatabaseService.get_session() as session:
        yield UnitOfWork(session)
