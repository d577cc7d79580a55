"""
Progression Module
==================

Domain: player XP, levels and login streaks

Services:
- ProgressionService: progression reads, streaks and XP application
"""

from .service import ProgressionService, XpAward

__all__ = [
    "ProgressionService",
    "XpAward",
]
