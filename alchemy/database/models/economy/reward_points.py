"""
RewardPoints: loyalty ledger balance per player.
Schema only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, TimestampMixin


class RewardPoints(Base, IdMixin, TimestampMixin):
    """
    Spendable balance plus monotonic lifetime total.

    `tier` is a denormalized copy of the tier derived from `lifetime_earned`.
    """

    __tablename__ = "reward_points"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="balance_non_negative"),
        CheckConstraint("lifetime_earned >= 0", name="lifetime_non_negative"),
        CheckConstraint("balance <= lifetime_earned", name="balance_within_lifetime"),
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lifetime_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tier: Mapped[str] = mapped_column(String(32), nullable=False, default="Novice")
    tier_updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
