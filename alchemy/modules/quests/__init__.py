"""
Quests Module
=============

Domain: quest catalog, per-player quest lifecycle and reward claims

Services:
- QuestService: lifecycle transitions and the atomic claim
"""

from .service import QuestService

__all__ = ["QuestService"]
