"""
Quest: immutable quest catalog entry.
Schema only.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from alchemy.core.database.base import Base, IdMixin, TimestampMixin
from ..enums import QuestType


class Quest(Base, IdMixin, TimestampMixin):
    """
    Quest definition shared by all players.

    Schema-only:
    - name, description, quest_type
    - required_level gate
    - xp_reward, ingredient_rewards [{"ingredient_id", "quantity"}], cosmetic_rewards [str]
    - goal: progress needed to complete
    """

    __tablename__ = "quests"
    __table_args__ = (
        CheckConstraint("xp_reward >= 0", name="xp_reward_non_negative"),
        CheckConstraint("goal >= 1", name="goal_positive"),
        CheckConstraint("required_level >= 1", name="required_level_positive"),
    )

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    quest_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=QuestType.DAILY.value, index=True
    )

    required_level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    goal: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ingredient_rewards: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    cosmetic_rewards: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
