"""
PlayerState: per-player XP, level and login streak.
Schema only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, TimestampMixin


class PlayerState(Base, IdMixin, TimestampMixin):
    """
    One row per user, created lazily with zero state.

    `level` is always derived from `total_xp` by the leveling curve;
    `total_xp` never decreases.
    """

    __tablename__ = "player_states"
    __table_args__ = (
        CheckConstraint("xp >= 0", name="xp_non_negative"),
        CheckConstraint("total_xp >= 0", name="total_xp_non_negative"),
        CheckConstraint("level >= 1", name="level_positive"),
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_daily_reward_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
