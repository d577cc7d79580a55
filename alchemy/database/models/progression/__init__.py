"""
Progression domain ORM models.

Exports:
- PlayerState
- Quest
- PlayerQuest
"""

from .player_quest import PlayerQuest
from .player_state import PlayerState
from .quest import Quest

__all__ = [
    "PlayerQuest",
    "PlayerState",
    "Quest",
]
