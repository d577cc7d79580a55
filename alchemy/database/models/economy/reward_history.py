"""
RewardHistoryEntry: append-only loyalty ledger audit log.
Schema only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, utc_now


class RewardHistoryEntry(Base, IdMixin):
    """
    Immutable once written.

    Schema-only:
    - type: earned | redeemed
    - points: signed (+earned, -redeemed)
    - description, optional order_id
    """

    __tablename__ = "reward_history"
    __table_args__ = (
        Index("ix_reward_history_user_created", "user_id", "created_at"),
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    order_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
