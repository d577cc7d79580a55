"""
InventoryItem: per-player item quantities.
Schema only.
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, TimestampMixin
from ..enums import ItemType


class InventoryItem(Base, IdMixin, TimestampMixin):
    """
    One row per (user, item). Quantity is additive and never negative.
    """

    __tablename__ = "inventory_items"
    __table_args__ = (
        UniqueConstraint("user_id", "item_id", name="uq_inventory_items_user_item"),
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    item_id: Mapped[str] = mapped_column(String(64), nullable=False)
    item_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ItemType.INGREDIENT.value
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
