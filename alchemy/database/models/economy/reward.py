"""
Reward: redeemable loyalty catalog entry.
Schema only.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, TimestampMixin


class Reward(Base, IdMixin, TimestampMixin):
    """
    Catalog reward gated by cost and minimum tier.

    `stock` of None means unlimited; a non-null stock never goes negative.
    """

    __tablename__ = "rewards"
    __table_args__ = (
        CheckConstraint("points_cost >= 0", name="points_cost_non_negative"),
        CheckConstraint("stock IS NULL OR stock >= 0", name="stock_non_negative"),
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    points_cost: Mapped[int] = mapped_column(Integer, nullable=False)

    discount_type: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    discount_value: Mapped[Optional[float]] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    product_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    minimum_tier: Mapped[str] = mapped_column(String(32), nullable=False, default="Novice")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    stock: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
