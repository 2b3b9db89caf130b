"""Pytest configuration and fixtures."""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from inventory import InMemoryInventory
from lifecycle import OrderLifecycleController
from main import app, get_controller
from menu import MenuCatalog, StationMapping
from schemas import InventoryItem, MenuItem, Order, OrderItem, RecipeItem, Station


@pytest.fixture
def menu() -> MenuCatalog:
    """Kitchen dishes, mapped drinks, and one explicit station override."""
    return MenuCatalog([
        MenuItem(
            id="pad-thai",
            name="Pad Thai",
            price=120.0,
            category_id="mains",
            recipe=[
                RecipeItem(inventory_item_id="noodles", quantity=0.2),
                RecipeItem(inventory_item_id="shrimp", quantity=3),
            ],
        ),
        MenuItem(id="green-curry", name="Green Curry", price=150.0, category_id="mains"),
        MenuItem(
            id="thai-tea",
            name="Thai Iced Tea",
            price=60.0,
            category_id="drinks",
            recipe=[RecipeItem(inventory_item_id="tea-leaves", quantity=0.05)],
        ),
        MenuItem(id="beer", name="House Beer", price=90.0, category_id="drinks"),
        # Dessert category is kitchen, but this one is made at the bar.
        MenuItem(id="affogato", name="Affogato", price=80.0, category_id="desserts", station=Station.BAR),
    ])


@pytest.fixture
def mapping() -> StationMapping:
    return StationMapping({"drinks": "bar", "desserts": "kitchen"})


@pytest.fixture
def inventory() -> InMemoryInventory:
    return InMemoryInventory([
        InventoryItem(id="noodles", name="Rice Noodles", quantity=10, unit="kg", min_quantity=1),
        InventoryItem(id="shrimp", name="Shrimp", quantity=100, unit="pcs", min_quantity=10),
        InventoryItem(id="tea-leaves", name="Tea Leaves", quantity=2, unit="kg", min_quantity=0.5),
    ])


@pytest.fixture
def controller(menu, mapping, inventory) -> OrderLifecycleController:
    return OrderLifecycleController(menu=menu, mapping=mapping, inventory=inventory)


def make_order(*lines, order_id: str = "ord-test-0001", table_id: str = "T1") -> Order:
    """Build an unplaced order from (menu_id, name, quantity, price) tuples."""
    return Order(
        id=order_id,
        table_id=table_id,
        items=[
            OrderItem(menu_id=menu_id, name=name, quantity=quantity, price=price)
            for menu_id, name, quantity, price in lines
        ],
    )


PAD_THAI = ("pad-thai", "Pad Thai", 2, 120.0)
THAI_TEA = ("thai-tea", "Thai Iced Tea", 2, 60.0)
GREEN_CURRY = ("green-curry", "Green Curry", 1, 150.0)
BEER = ("beer", "House Beer", 1, 90.0)


@pytest.fixture
def mixed_order(controller) -> Order:
    """Placed order: Pad Thai (kitchen, qty 2) + Thai Iced Tea (bar, qty 2)."""
    return controller.place_order(make_order(PAD_THAI, THAI_TEA))


@pytest.fixture
def client(controller) -> Generator[TestClient, None, None]:
    """Create a test client backed by the fixture controller."""
    app.dependency_overrides[get_controller] = lambda: controller
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
