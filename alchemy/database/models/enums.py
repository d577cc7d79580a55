"""
Database Model Enums
====================

Lightweight enumerations for database models.

Values are stored as plain strings so the schema stays portable between
PostgreSQL and SQLite. Service layers compare against `.value`.
"""

from __future__ import annotations

import enum


class QuestType(str, enum.Enum):
    """Catalog classification of a quest."""

    DAILY = "daily"
    WEEKLY = "weekly"
    STORY = "story"
    EVENT = "event"
    ACHIEVEMENT = "achievement"


class QuestStatus(str, enum.Enum):
    """
    Lifecycle of a player's quest instance.

    Transitions only move forward:
    available -> active -> completed -> claimed.
    """

    AVAILABLE = "available"
    ACTIVE = "active"
    COMPLETED = "completed"
    CLAIMED = "claimed"

    @property
    def rank(self) -> int:
        return _QUEST_STATUS_ORDER.index(self)


_QUEST_STATUS_ORDER = (
    QuestStatus.AVAILABLE,
    QuestStatus.ACTIVE,
    QuestStatus.COMPLETED,
    QuestStatus.CLAIMED,
)


class ItemType(str, enum.Enum):
    """Kinds of inventory entries."""

    INGREDIENT = "ingredient"
    POTION = "potion"
    CONSUMABLE = "consumable"


class RewardHistoryType(str, enum.Enum):
    """Direction of a loyalty-points ledger movement."""

    EARNED = "earned"
    REDEEMED = "redeemed"


class DiscountType(str, enum.Enum):
    """How a redeemed reward discounts an order."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"
    FREE_PRODUCT = "free_product"
