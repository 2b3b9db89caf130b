"""
Typed failures raised by the order / station status core.

Every error is recoverable: the operation that raised it has left the
order exactly as it was before the call.
"""
from typing import Dict, Optional


class OrderStateError(Exception):
    """Base exception for all order state machine errors"""

    def __init__(self, message: str, error_code: str, details: Optional[Dict] = None):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class NotFound(OrderStateError):
    """Raised when an order id or item index does not resolve"""

    def __init__(self, order_id: str, item_index: Optional[int] = None):
        self.order_id = order_id
        self.item_index = item_index
        if item_index is None:
            message = f"Order {order_id} not found"
        else:
            message = f"Item {item_index} not found on order {order_id}"
        super().__init__(message, "NOT_FOUND", {"order_id": order_id, "item_index": item_index})


class InvalidTransition(OrderStateError):
    """Raised for an illegal item, station or order status move"""

    def __init__(self, order_id: str, current: str, target: str, subject: str = "item"):
        self.order_id = order_id
        self.current = current
        self.target = target
        message = f"Cannot move {subject} on order {order_id} from {current} to {target}"
        details = {"order_id": order_id, "subject": subject, "from": current, "to": target}
        super().__init__(message, "INVALID_TRANSITION", details)


class AlreadyTerminal(OrderStateError):
    """Raised when mutating an order that is Completed or Cancelled"""

    def __init__(self, order_id: str, status: str):
        self.order_id = order_id
        self.status = status
        message = f"Order {order_id} is already {status}"
        super().__init__(message, "ALREADY_TERMINAL", {"order_id": order_id, "status": status})


class EmptyReason(OrderStateError):
    """Raised when a void is requested without a reason"""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(
            f"A reason is required to void order {order_id}",
            "EMPTY_REASON",
            {"order_id": order_id},
        )


class EmptyOrder(OrderStateError):
    """Raised when placing an order without any items"""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} has no items", "EMPTY_ORDER", {"order_id": order_id})


class DuplicateOrder(OrderStateError):
    """Raised when placing an order under an id that already exists"""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} already exists", "DUPLICATE_ORDER", {"order_id": order_id})
