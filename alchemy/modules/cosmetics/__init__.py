"""
Cosmetics Module
================

Domain: unlocked themes and table skins
"""

from .service import CosmeticsService

__all__ = ["CosmeticsService"]
