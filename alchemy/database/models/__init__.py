"""
Database Models Package
========================

SQLAlchemy ORM models for the Alchemy progression engine, organized by domain.

All models:
- Schema-only, no business logic
- Use Mapped[] syntax with mapped_column()
- Inherit from IdMixin / TimestampMixin where applicable
- Use portable JSON columns so the same schema runs on PostgreSQL and SQLite

Domain Organization:
--------------------
- progression: PlayerState, Quest, PlayerQuest
- collection: InventoryItem, PlayerCosmetics, Theme, TableSkin
- economy: RewardPoints, RewardHistoryEntry, Reward
- enums: Shared type-safe enumerations
"""

from alchemy.core.database.base import Base

from .collection import InventoryItem, PlayerCosmetics, TableSkin, Theme
from .economy import Reward, RewardHistoryEntry, RewardPoints
from .enums import DiscountType, ItemType, QuestStatus, QuestType, RewardHistoryType
from .progression import PlayerQuest, PlayerState, Quest

__all__ = [
    "Base",
    # Progression
    "PlayerState",
    "Quest",
    "PlayerQuest",
    # Collection
    "InventoryItem",
    "PlayerCosmetics",
    "Theme",
    "TableSkin",
    # Economy
    "RewardPoints",
    "RewardHistoryEntry",
    "Reward",
    # Enums
    "DiscountType",
    "ItemType",
    "QuestStatus",
    "QuestType",
    "RewardHistoryType",
]
