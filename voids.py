"""
Reason-coded cancellation of whole orders.
"""
import logging
from typing import List

from exceptions import AlreadyTerminal, EmptyReason
from schemas import Order, OrderItem, OrderStatus

logger = logging.getLogger(__name__)


class VoidWorkflow:
    def validate(self, order: Order, reason: str) -> str:
        if reason is None or not reason.strip():
            raise EmptyReason(order.id)
        if order.is_terminal:
            raise AlreadyTerminal(order.id, order.status.value)
        return reason.strip()

    def void(self, order: Order, reason: str) -> List[OrderItem]:
        """Cancel the order and return the served items whose stock must go back."""
        reason = self.validate(order, reason)

        previous = order.status
        order.status = OrderStatus.CANCELLED
        order.void_reason = reason

        logger.warning(f"Order {order.id} VOIDED from {previous.value}. Reason: {reason}")
        return [item for item in order.items if item.status == OrderStatus.SERVED]
