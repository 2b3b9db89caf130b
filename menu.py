"""
Read-only collaborators consumed by the core: the menu catalog and the
category -> station mapping.
"""
from typing import Dict, Iterable, Optional

from schemas import MenuItem, Station


class MenuCatalog:
    """In-memory menu lookup keyed by menu item id."""

    def __init__(self, items: Iterable[MenuItem] = ()):
        self._items: Dict[str, MenuItem] = {item.id: item for item in items}

    def resolve(self, menu_id: str) -> Optional[MenuItem]:
        return self._items.get(menu_id)

    def upsert(self, item: MenuItem) -> None:
        # Replacing an item reclassifies open orders on their next read.
        self._items[item.id] = item

    def __len__(self) -> int:
        return len(self._items)


class StationMapping:
    """Category id -> station, as configured in restaurant settings."""

    def __init__(self, mapping: Optional[Dict[str, str]] = None):
        self._mapping: Dict[str, Station] = {
            category_id: Station(station) for category_id, station in (mapping or {}).items()
        }

    def get(self, category_id: str) -> Optional[Station]:
        return self._mapping.get(category_id)

    def assign(self, category_id: str, station: Station) -> None:
        self._mapping[category_id] = Station(station)

    def as_dict(self) -> Dict[str, str]:
        return {category_id: station.value for category_id, station in self._mapping.items()}
