"""
Station aggregate status

A station's status on an order is derived from the items routed to it:

- no items            -> None
- every item Served   -> Served
- any item Cooking    -> Cooking
- otherwise           -> Pending

The aggregate is never set directly. Bulk station actions ("Cook All",
"Serve All", "Start Mixing All", "All Ready") move the member items and the
aggregate follows.
"""
import logging
from typing import Iterable, Optional

from exceptions import InvalidTransition
from menu import MenuCatalog, StationMapping
from schemas import PROGRESS_RANK, Order, OrderStatus, Station
from stations import StationRouter
from tracking import ItemCallback

logger = logging.getLogger(__name__)

BULK_TARGETS = (OrderStatus.COOKING, OrderStatus.SERVED)


def aggregate_item_statuses(statuses: Iterable[OrderStatus]) -> OrderStatus:
    statuses = list(statuses)
    if not statuses:
        return OrderStatus.NONE
    if all(status == OrderStatus.SERVED for status in statuses):
        return OrderStatus.SERVED
    if any(status == OrderStatus.COOKING for status in statuses):
        return OrderStatus.COOKING
    return OrderStatus.PENDING


class StationAggregator:
    def __init__(self, router: StationRouter, menu: MenuCatalog, mapping: StationMapping):
        self.router = router
        self.menu = menu
        self.mapping = mapping

    def station_items(self, order: Order, station: Station):
        return self.router.items_for_station(order, station, self.menu, self.mapping)

    def aggregate_status(self, order: Order, station: Station) -> OrderStatus:
        return aggregate_item_statuses(item.status for _, item in self.station_items(order, station))

    def refresh(self, order: Order) -> Order:
        """Recompute both cached station aggregates on the order."""
        order.kitchen_status = self.aggregate_status(order, Station.KITCHEN)
        order.bar_status = self.aggregate_status(order, Station.BAR)
        return order

    def set_station_status(
        self,
        order: Order,
        station: Station,
        target: OrderStatus,
        on_served: Optional[ItemCallback] = None,
    ) -> int:
        """Advance every item at the station that is behind target. Returns how many moved."""
        station = Station(station)
        current = order.station_status(station).value
        try:
            target = OrderStatus(target)
        except ValueError:
            raise InvalidTransition(order.id, current, str(target), subject=f"{station.value} station")
        if target not in BULK_TARGETS:
            raise InvalidTransition(
                order.id, current, target.value, subject=f"{station.value} station"
            )

        moved = 0
        for index, item in self.station_items(order, station):
            if PROGRESS_RANK[item.status] >= PROGRESS_RANK[target]:
                continue
            item.status = target
            moved += 1
            if target == OrderStatus.SERVED and on_served is not None:
                on_served(index, item)

        self.refresh(order)
        logger.info(f"Order {order.id} {station.value} station set to {target.value} ({moved} item(s) moved)")
        return moved
