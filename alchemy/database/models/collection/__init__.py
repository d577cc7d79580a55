"""
Collection domain ORM models.

Exports:
- InventoryItem
- PlayerCosmetics
- Theme, TableSkin (cosmetic catalog)
"""

from .inventory_item import InventoryItem
from .player_cosmetics import PlayerCosmetics
from .table_skin import TableSkin
from .theme import Theme

__all__ = [
    "InventoryItem",
    "PlayerCosmetics",
    "TableSkin",
    "Theme",
]
