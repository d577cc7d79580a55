"""
Domain modules for Alchemy.

Each module owns its repositories and services:
- progression: XP, levels, login streaks
- quests: quest lifecycle and claims
- inventory: item quantities
- cosmetics: unlocked themes and skins
- rewards: points ledger, tiers, redemption
- shared: base classes, exceptions, formulas, unit of work
"""
