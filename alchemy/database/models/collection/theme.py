"""
Theme: cosmetic theme catalog entry.
Schema only.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, TimestampMixin


class Theme(Base, IdMixin, TimestampMixin):
    """
    Theme shared by all players.

    A player may equip a theme once it is in their unlocked list or their
    level reaches `required_level`.
    """

    __tablename__ = "themes"
    __table_args__ = (
        CheckConstraint("required_level >= 1", name="required_level_positive"),
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    required_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
