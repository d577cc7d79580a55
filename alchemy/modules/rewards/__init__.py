"""
Rewards Module
==============

Domain: loyalty points ledger, tiers and catalog redemption

Services:
- RewardsLedgerService: earn/spend points, history, tier progress
- RedemptionService: spend points on catalog rewards
"""

from .ledger_service import RewardsLedgerService
from .redemption_service import RedemptionService
from .tiers import TierInfo, TierTable

__all__ = [
    "RewardsLedgerService",
    "RedemptionService",
    "TierInfo",
    "TierTable",
]
