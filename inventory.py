"""
Inventory reconciliation

The core only ever asks for two things: consume the stock a recipe uses when
an item is served, and put it back when a served item is removed or its
order voided. Both calls are best-effort and must never raise for missing
recipes or unknown inventory ids.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from schemas import InventoryItem, InventoryLog, RecipeItem

logger = logging.getLogger(__name__)


class InventoryReconciler(ABC):
    @abstractmethod
    def consume(self, recipe: Optional[List[RecipeItem]], quantity: int, reason: str = "") -> None:
        pass

    @abstractmethod
    def restore(self, recipe: Optional[List[RecipeItem]], quantity: int, reason: str = "") -> None:
        pass


class NullInventory(InventoryReconciler):
    """Reconciler for deployments that do not track stock."""

    def consume(self, recipe, quantity, reason=""):
        return None

    def restore(self, recipe, quantity, reason=""):
        return None


class InMemoryInventory(InventoryReconciler):
    """Stock levels with an adjustment log per inventory item"""

    def __init__(self, items: Iterable[InventoryItem] = ()):
        self.items: Dict[str, InventoryItem] = {item.id: item for item in items}

    def get(self, inventory_item_id: str) -> Optional[InventoryItem]:
        return self.items.get(inventory_item_id)

    def consume(self, recipe, quantity, reason=""):
        self._adjust(recipe, quantity, -1, reason)

    def restore(self, recipe, quantity, reason=""):
        self._adjust(recipe, quantity, 1, reason)

    def _adjust(self, recipe: Optional[List[RecipeItem]], quantity: int, sign: int, reason: str) -> None:
        if not recipe:
            return

        for recipe_item in recipe:
            stock = self.items.get(recipe_item.inventory_item_id)
            if stock is None:
                logger.warning(f"Inventory item {recipe_item.inventory_item_id} not found, skipping adjustment")
                continue

            amount = recipe_item.quantity * quantity
            if amount == 0:
                continue
            old_quantity = stock.quantity
            stock.quantity = old_quantity + sign * amount
            stock.logs.insert(
                0,
                InventoryLog(change_amount=sign * amount, reason=reason, final_quantity=stock.quantity),
            )
            if sign < 0:
                self._check_low_stock(stock, old_quantity)

    @staticmethod
    def _check_low_stock(stock: InventoryItem, old_quantity: float) -> None:
        if old_quantity > stock.min_quantity >= stock.quantity:
            logger.warning(f"Low Stock Alert: {stock.name} is down to {stock.quantity} {stock.unit}")
