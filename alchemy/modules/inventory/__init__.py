"""
Inventory Module
================

Domain: per-player item quantities (ingredients, potions, consumables)
"""

from .service import InventoryService

__all__ = ["InventoryService"]
