"""
PlayerQuest: a player's instance of a catalog quest.
Schema only.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alchemy.core.database.base import Base, IdMixin, TimestampMixin
from ..enums import QuestStatus

if TYPE_CHECKING:
    from .quest import Quest


class PlayerQuest(Base, IdMixin, TimestampMixin):
    """
    Per-player quest state.

    Status only moves forward; `claimed_at` is written exactly once.
    """

    __tablename__ = "player_quests"
    __table_args__ = (
        UniqueConstraint("user_id", "quest_id", name="uq_player_quests_user_quest"),
        CheckConstraint("progress >= 0", name="progress_non_negative"),
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    quest_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("quests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=QuestStatus.AVAILABLE.value, index=True
    )
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    claimed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Never lazy-load under asyncio; repositories pass eager_load explicitly
    quest: Mapped["Quest"] = relationship(lazy="raise")
