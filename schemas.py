"""
Domain Schemas for the Order / Station Status Core

Each Pydantic model below is either owned by the core (OrderItem, Order)
or read from an external collaborator (MenuItem, InventoryItem).
When MongoDB is configured, the collection name is the lowercase class
name (e.g., Order -> "order", MenuItem -> "menuitem").
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Literal
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator


class Station(str, Enum):
    KITCHEN = "kitchen"
    BAR = "bar"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    COOKING = "Cooking"
    SERVED = "Served"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NONE = "None"  # station has no items for this order


ITEM_STATUSES = (OrderStatus.PENDING, OrderStatus.COOKING, OrderStatus.SERVED)
TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

# Forward order of the working statuses, used for monotonic comparisons.
PROGRESS_RANK = {
    OrderStatus.PENDING: 0,
    OrderStatus.COOKING: 1,
    OrderStatus.SERVED: 2,
}

PaymentMethod = Literal["Cash", "QR", "Card"]


def _new_order_id() -> str:
    return f"ord-{uuid4().hex[:12]}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecipeItem(BaseModel):
    inventory_item_id: str = Field(..., description="Reference to inventory item id")
    quantity: float = Field(..., gt=0, description="Stock consumed per unit sold")


class MenuItem(BaseModel):
    id: str = Field(..., description="Menu item id")
    name: str = Field(..., description="Display name")
    price: float = Field(..., ge=0)
    category_id: str = Field(..., description="Reference to category id")
    station: Optional[Station] = Field(None, description="Explicit station override")
    recipe: List[RecipeItem] = []
    is_available: bool = True


class InventoryLog(BaseModel):
    change_amount: float
    reason: str
    final_quantity: float
    date: datetime = Field(default_factory=_utc_now)


class InventoryItem(BaseModel):
    id: str
    name: str
    quantity: float = 0.0
    unit: str = "unit"
    min_quantity: float = 0.0
    logs: List[InventoryLog] = []


class OrderItem(BaseModel):
    menu_id: str = Field(..., description="Reference to menu item id")
    name: str = Field(..., description="Name snapshot taken when the order was placed")
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0, description="Unit price snapshot")
    note: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING

    @field_validator("status")
    @classmethod
    def _item_level_status(cls, value: OrderStatus) -> OrderStatus:
        if value not in ITEM_STATUSES:
            raise ValueError(f"item status must be Pending, Cooking or Served, got {value.value}")
        return value


class Order(BaseModel):
    id: str = Field(default_factory=_new_order_id)
    table_id: str = Field("takeout", description="'takeout' or table id")
    items: List[OrderItem] = Field(..., description="Order lines, owned by this order")
    status: OrderStatus = OrderStatus.PENDING
    kitchen_status: OrderStatus = OrderStatus.NONE
    bar_status: OrderStatus = OrderStatus.NONE
    total: float = 0.0
    timestamp: datetime = Field(default_factory=_utc_now)
    customer_name: Optional[str] = None
    customer_id: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    discount: float = 0.0
    points_earned: Optional[int] = None
    points_redeemed: Optional[int] = None
    void_reason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def _order_level_status(cls, value: OrderStatus) -> OrderStatus:
        if value == OrderStatus.NONE:
            raise ValueError("order status cannot be None")
        return value

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def amount_due(self) -> float:
        return max(self.total - self.discount, 0.0)

    def station_status(self, station: Station) -> OrderStatus:
        if station == Station.KITCHEN:
            return self.kitchen_status
        return self.bar_status


"""
Notes:
- Station aggregates and the overall status are cached projections of item
  state. They are recomputed by the lifecycle controller after every
  mutation and are never set directly by callers.
"""
