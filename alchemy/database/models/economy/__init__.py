"""
Economy domain ORM models.

Exports:
- Reward
- RewardHistoryEntry
- RewardPoints
"""

from .reward import Reward
from .reward_history import RewardHistoryEntry
from .reward_points import RewardPoints

__all__ = [
    "Reward",
    "RewardHistoryEntry",
    "RewardPoints",
]
