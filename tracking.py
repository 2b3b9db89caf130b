"""
Per-item status tracking

Items only move forward: Pending -> Cooking -> Served, with Pending ->
Served allowed as a shortcut. Served is final for an item.
"""
import logging
from typing import Callable, Dict, FrozenSet, Optional

from exceptions import InvalidTransition, NotFound
from schemas import ITEM_STATUSES, Order, OrderItem, OrderStatus

logger = logging.getLogger(__name__)

ItemCallback = Callable[[int, OrderItem], None]

VALID_ITEM_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.COOKING, OrderStatus.SERVED}),
    OrderStatus.COOKING: frozenset({OrderStatus.SERVED}),
    OrderStatus.SERVED: frozenset(),
}


def get_item(order: Order, index: int) -> OrderItem:
    if index < 0 or index >= len(order.items):
        raise NotFound(order.id, index)
    return order.items[index]


class ItemStatusTracker:
    """Validates and applies item transitions, then lets the owner recompute
    station aggregates and the overall status."""

    def __init__(self, recompute: Optional[Callable[[Order], None]] = None):
        self.recompute = recompute

    @staticmethod
    def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
        return target in VALID_ITEM_TRANSITIONS.get(current, frozenset())

    def set_item_status(
        self,
        order: Order,
        index: int,
        new_status: OrderStatus,
        on_served: Optional[ItemCallback] = None,
    ) -> Order:
        """Move one item to new_status and return the order.

        A same-status request returns the order untouched, without a recompute.
        """
        item = get_item(order, index)
        try:
            new_status = OrderStatus(new_status)
        except ValueError:
            raise InvalidTransition(order.id, item.status.value, str(new_status))

        if new_status not in ITEM_STATUSES:
            raise InvalidTransition(order.id, item.status.value, new_status.value)
        if item.status == new_status:
            return order
        if not self.can_transition(item.status, new_status):
            logger.warning(
                f"Rejected item transition on order {order.id} item {index}: "
                f"{item.status.value} -> {new_status.value}"
            )
            raise InvalidTransition(order.id, item.status.value, new_status.value)

        old_status = item.status
        item.status = new_status
        if new_status == OrderStatus.SERVED and on_served is not None:
            on_served(index, item)

        if self.recompute is not None:
            self.recompute(order)

        logger.info(f"Order {order.id} item {index} ({item.name}): {old_status.value} -> {new_status.value}")
        return order
