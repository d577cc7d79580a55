"""
Inventory Service
=================

Purpose
-------
Read and grow a player's item quantities. Quantities are additive: an award
creates the row at the given quantity or increments the existing one.
Nothing here ever decreases a quantity.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Tuple

from alchemy.core.validation.input_validator import InputValidator
from alchemy.modules.shared.base_service import BaseService

if TYPE_CHECKING:
    from alchemy.modules.shared.unit_of_work import UnitOfWork


class InventoryService(BaseService):
    """Service for per-player inventory."""

    async def get_inventory(self, user_id: str) -> List[Dict[str, Any]]:
        """
        List a player's items, ordered by item_type ascending and newest
        first within a type. A player with no items gets an empty list.
        """
        user_id = InputValidator.validate_identifier(user_id, "user_id")

        async with self.read_only_unit_of_work() as uow:
            items = await uow.inventory.list_for_user(user_id)
            return [
                {
                    "id": item.id,
                    "item_id": item.item_id,
                    "item_type": item.item_type,
                    "quantity": item.quantity,
                    "created_at": item.created_at,
                    "updated_at": item.updated_at,
                }
                for item in items
            ]

    async def award_items(
        self,
        uow: UnitOfWork,
        user_id: str,
        item_type: str,
        awards: Iterable[Tuple[str, int]],
    ) -> Dict[str, int]:
        """
        Upsert (item_id, quantity) awards inside the caller's unit of work.

        Returns:
            Mapping of item_id to the resulting quantity
        """
        resulting: Dict[str, int] = {}

        for item_id, quantity in awards:
            self.validate_positive_int(quantity, "quantity")

            item = await uow.inventory.get_or_create_item_for_update(
                user_id, item_id, item_type
            )
            item.quantity += quantity

            resulting[item_id] = item.quantity

        return resulting
