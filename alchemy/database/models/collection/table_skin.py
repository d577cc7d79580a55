"""
TableSkin: table skin catalog entry belonging to a theme.
Schema only.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, TimestampMixin


class TableSkin(Base, IdMixin, TimestampMixin):
    __tablename__ = "table_skins"
    __table_args__ = (
        CheckConstraint("required_level >= 1", name="required_level_positive"),
    )

    theme_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("themes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    asset_url: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    required_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
