"""
Order lifecycle controller

Single mutation entry point for live orders. Every operation loads a copy of
the order, applies the change, recomputes the station aggregates and the
overall status, and only then stores the order and reconciles inventory.
A failing operation raises before anything is stored, so callers never see
a half-applied change.

Overall status precedence:

1. Cancelled  - set only by a void
2. Completed  - set only by checkout
3. derived from the active (non-None) station aggregates:
   all Served -> Served, any Cooking -> Cooking, otherwise Pending.
   An order with no active station counts as all Served.
"""
import logging
import threading
from typing import Iterable, List, Optional

from aggregation import StationAggregator
from database import InMemoryOrderRepository
from exceptions import AlreadyTerminal, DuplicateOrder, EmptyOrder, NotFound
from inventory import InventoryReconciler, NullInventory
from menu import MenuCatalog, StationMapping
from schemas import PROGRESS_RANK, Order, OrderItem, OrderStatus, Station
from stations import StationRouter
from tracking import ItemStatusTracker, get_item
from voids import VoidWorkflow

logger = logging.getLogger(__name__)


def derive_overall_status(station_statuses: Iterable[OrderStatus]) -> OrderStatus:
    active = [status for status in station_statuses if status != OrderStatus.NONE]
    if all(status == OrderStatus.SERVED for status in active):
        return OrderStatus.SERVED
    if any(status == OrderStatus.COOKING for status in active):
        return OrderStatus.COOKING
    return OrderStatus.PENDING


def calculate_total(items: List[OrderItem]) -> float:
    return round(sum(item.price * item.quantity for item in items), 2)


class OrderLifecycleController:
    def __init__(
        self,
        repository=None,
        menu: Optional[MenuCatalog] = None,
        mapping: Optional[StationMapping] = None,
        inventory: Optional[InventoryReconciler] = None,
        router: Optional[StationRouter] = None,
    ):
        self.repository = repository if repository is not None else InMemoryOrderRepository()
        self.menu = menu if menu is not None else MenuCatalog()
        self.mapping = mapping if mapping is not None else StationMapping()
        self.inventory = inventory if inventory is not None else NullInventory()
        self.router = router if router is not None else StationRouter()
        self.aggregator = StationAggregator(self.router, self.menu, self.mapping)
        self.tracker = ItemStatusTracker(recompute=self.recompute)
        self.voids = VoidWorkflow()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def recompute(self, order: Order, monotonic: bool = True) -> Order:
        """Refresh station aggregates, then the overall status.

        With monotonic=True the overall status never moves backwards. Item
        removal passes False only when it took away the last Cooking item.
        """
        self.aggregator.refresh(order)
        if order.is_terminal:
            return order

        derived = derive_overall_status([order.kitchen_status, order.bar_status])
        if monotonic and PROGRESS_RANK[derived] < PROGRESS_RANK[order.status]:
            return order
        if derived != order.status:
            logger.info(f"Order {order.id} status {order.status.value} -> {derived.value}")
        order.status = derived
        return order

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        with self._lock:
            return self.aggregator.refresh(self._load(order_id))

    def list_orders(self, station: Optional[Station] = None, active_only: bool = False) -> List[Order]:
        """Orders newest first, optionally only those with items at a station."""
        with self._lock:
            orders = [self.aggregator.refresh(order) for order in self.repository.list()]

        if station is not None:
            orders = [order for order in orders if order.station_status(Station(station)) != OrderStatus.NONE]
        if active_only:
            orders = [order for order in orders if not order.is_terminal]
        return sorted(orders, key=lambda order: order.timestamp, reverse=True)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def place_order(self, order: Order) -> Order:
        with self._lock:
            order = order.model_copy(deep=True)
            if not order.items:
                raise EmptyOrder(order.id)
            if self.repository.get(order.id) is not None:
                raise DuplicateOrder(order.id)

            for item in order.items:
                item.status = OrderStatus.PENDING
            order.status = OrderStatus.PENDING
            order.void_reason = None
            order.total = calculate_total(order.items)
            order.discount = min(max(order.discount, 0.0), order.total)
            self.recompute(order)

            self.repository.add(order)
            logger.info(
                f"Placed order {order.id} for table {order.table_id}: {len(order.items)} item(s), "
                f"kitchen={order.kitchen_status.value} bar={order.bar_status.value}"
            )
            return order

    def set_item_status(self, order_id: str, item_index: int, status: OrderStatus) -> Order:
        with self._lock:
            order = self._load_mutable(order_id)
            before = get_item(order, item_index).status
            served: List[OrderItem] = []
            order = self.tracker.set_item_status(
                order, item_index, status, on_served=lambda index, item: served.append(item)
            )
            if order.items[item_index].status == before:
                return order
            return self._commit(order, consume=served)

    def set_station_status(self, order_id: str, station: Station, target: OrderStatus) -> Order:
        """Bulk station action, e.g. "Cook All" (Cooking) or "Serve All" (Served)."""
        with self._lock:
            order = self._load_mutable(order_id)
            served: List[OrderItem] = []
            self.aggregator.set_station_status(
                order, station, target, on_served=lambda index, item: served.append(item)
            )
            self.recompute(order)
            return self._commit(order, consume=served)

    def remove_item(self, order_id: str, item_index: int) -> Order:
        with self._lock:
            order = self._load_mutable(order_id)
            item = get_item(order, item_index)

            order.items.pop(item_index)
            order.total = calculate_total(order.items)
            # Only taking away the last Cooking item may send the order back to Pending.
            lost_progress = item.status == OrderStatus.COOKING and not any(
                remaining.status == OrderStatus.COOKING for remaining in order.items
            )
            self.recompute(order, monotonic=not lost_progress)
            if not order.items:
                logger.warning(f"Order {order.id} has no items left, status collapses to {order.status.value}")

            restore = [item] if item.status == OrderStatus.SERVED else []
            logger.info(f"Removed item {item_index} ({item.name} x{item.quantity}) from order {order.id}")
            return self._commit(order, restore=restore)

    def void_order(self, order_id: str, reason: str) -> Order:
        with self._lock:
            order = self._load(order_id)
            served = self.voids.void(order, reason)
            return self._commit(order, restore=served)

    def complete_order(self, order_id: str, payment_method: Optional[str] = None) -> Order:
        """Checkout. Anything not yet served is served now."""
        with self._lock:
            order = self._load_mutable(order_id)
            served = [item for item in order.items if item.status != OrderStatus.SERVED]
            for item in served:
                item.status = OrderStatus.SERVED

            self.aggregator.refresh(order)
            order.status = OrderStatus.COMPLETED
            if payment_method is not None:
                order.payment_method = payment_method
            logger.info(f"Order {order.id} completed, amount due {order.amount_due:.2f}")
            return self._commit(order, consume=served)

    def update_discount(self, order_id: str, discount: float) -> Order:
        with self._lock:
            order = self._load_mutable(order_id)
            order.discount = min(max(discount, 0.0), order.total)
            return self._commit(order)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(self, order_id: str) -> Order:
        order = self.repository.get(order_id)
        if order is None:
            raise NotFound(order_id)
        return order

    def _load_mutable(self, order_id: str) -> Order:
        order = self._load(order_id)
        if order.is_terminal:
            raise AlreadyTerminal(order.id, order.status.value)
        return order

    def _commit(
        self, order: Order, consume: Iterable[OrderItem] = (), restore: Iterable[OrderItem] = ()
    ) -> Order:
        self.repository.save(order)
        for item in consume:
            self._reconcile(order, item, restore=False)
        for item in restore:
            self._reconcile(order, item, restore=True)
        return order

    def _reconcile(self, order: Order, item: OrderItem, restore: bool) -> None:
        menu_item = self.menu.resolve(item.menu_id)
        recipe = menu_item.recipe if menu_item is not None else None
        try:
            if restore:
                self.inventory.restore(recipe, item.quantity, reason=f"Restore Order #{order.id[-4:]}: {item.name}")
            else:
                self.inventory.consume(recipe, item.quantity, reason=f"Order #{order.id[-4:]}: {item.name}")
        except Exception as e:
            # Stock problems never block the status change that caused them.
            logger.error(f"Inventory reconciliation failed for order {order.id} item '{item.name}': {e}")
