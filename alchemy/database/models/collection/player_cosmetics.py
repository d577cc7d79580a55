"""
PlayerCosmetics: unlocked and equipped cosmetics per player.
Schema only.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, TimestampMixin


class PlayerCosmetics(Base, IdMixin, TimestampMixin):
    """
    Unlock sets are stored as JSON lists in unlock order.

    They only ever grow; services assign a new list rather than mutating
    the loaded one so the change is tracked.
    """

    __tablename__ = "player_cosmetics"

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)

    unlocked_themes: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    unlocked_skins: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    active_theme_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    active_table_skin_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
