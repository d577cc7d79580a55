"""
Alchemy: player progression and loyalty rewards engine.

The transaction core behind the storefront's gamification layer: quest
claims, XP and levels, inventory and cosmetic unlocks, and the points
ledger with tiered catalog redemption.
"""

__version__ = "0.1.0"
