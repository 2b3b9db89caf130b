"""
Station routing

An order item is sent to exactly one station. The station is resolved on
demand from the current menu and mapping, never stored on the item, so a
menu change reclassifies still-open orders the next time they are read.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from menu import MenuCatalog, StationMapping
from schemas import MenuItem, Order, OrderItem, Station

logger = logging.getLogger(__name__)

DEFAULT_STATION = Station.KITCHEN


class StationRule(ABC):
    """One tier of the routing policy. Returns None to defer to the next rule."""

    @abstractmethod
    def resolve(self, menu_item: MenuItem, mapping: StationMapping) -> Optional[Station]:
        pass


class ExplicitStationRule(StationRule):
    """Menu item carries its own station override"""

    def resolve(self, menu_item, mapping):
        return menu_item.station


class CategoryMappingRule(StationRule):
    """Station configured for the item's category"""

    def resolve(self, menu_item, mapping):
        return mapping.get(menu_item.category_id)


class StationRouter:
    """Ordered rule list, first match wins, kitchen when nothing matches."""

    def __init__(self, rules: Optional[List[StationRule]] = None, default: Station = DEFAULT_STATION):
        self.rules = list(rules) if rules is not None else [ExplicitStationRule(), CategoryMappingRule()]
        self.default = default

    def add_rule(self, rule: StationRule) -> None:
        self.rules.append(rule)

    def route(self, item: OrderItem, menu: MenuCatalog, mapping: StationMapping) -> Station:
        menu_item = menu.resolve(item.menu_id)
        if menu_item is None:
            # Unknown or deleted menu id stays visible on the default station.
            logger.debug(f"Menu item {item.menu_id} not found, routing '{item.name}' to {self.default.value}")
            return self.default

        for rule in self.rules:
            station = rule.resolve(menu_item, mapping)
            if station is not None:
                return Station(station)
        return self.default

    def items_for_station(
        self, order: Order, station: Station, menu: MenuCatalog, mapping: StationMapping
    ) -> List[Tuple[int, OrderItem]]:
        """(index, item) pairs of the order routed to the given station"""
        return [
            (index, item)
            for index, item in enumerate(order.items)
            if self.route(item, menu, mapping) == station
        ]
