"""Tests for the in-memory inventory reconciler."""

import logging

import pytest

from inventory import InMemoryInventory, NullInventory
from schemas import InventoryItem, OrderStatus, RecipeItem, Station

from conftest import PAD_THAI, THAI_TEA, make_order


@pytest.fixture
def recipe():
    return [
        RecipeItem(inventory_item_id="noodles", quantity=0.2),
        RecipeItem(inventory_item_id="shrimp", quantity=3),
    ]


class TestAdjustments:

    def test_consume_and_restore(self, inventory, recipe):
        inventory.consume(recipe, 2, reason="Order #0001: Pad Thai")
        assert inventory.get("noodles").quantity == pytest.approx(9.6)
        assert inventory.get("shrimp").quantity == pytest.approx(94)

        inventory.restore(recipe, 2, reason="Restore Order #0001: Pad Thai")
        assert inventory.get("noodles").quantity == pytest.approx(10)
        assert inventory.get("shrimp").quantity == pytest.approx(100)

    def test_every_adjustment_is_logged_newest_first(self, inventory, recipe):
        inventory.consume(recipe, 1, reason="Order #0001: Pad Thai")
        inventory.restore(recipe, 1, reason="Restore Order #0001: Pad Thai")

        logs = inventory.get("shrimp").logs
        assert [log.change_amount for log in logs] == [3, -3]
        assert logs[0].reason == "Restore Order #0001: Pad Thai"
        assert logs[0].final_quantity == 100

    @pytest.mark.parametrize("empty", [None, []])
    def test_missing_recipe_is_noop(self, inventory, empty):
        inventory.restore(empty, 3)
        inventory.consume(empty, 3)
        assert inventory.get("noodles").logs == []

    def test_unknown_inventory_id_is_skipped(self, inventory, caplog):
        recipe = [
            RecipeItem(inventory_item_id="saffron", quantity=1),
            RecipeItem(inventory_item_id="shrimp", quantity=1),
        ]
        with caplog.at_level(logging.WARNING):
            inventory.restore(recipe, 1)

        assert inventory.get("shrimp").quantity == 101
        assert "saffron" in caplog.text

    def test_null_inventory_accepts_anything(self, recipe):
        reconciler = NullInventory()
        reconciler.consume(recipe, 1)
        reconciler.restore(None, 1)


class TestLowStock:

    def test_warns_when_crossing_minimum(self, caplog):
        inventory = InMemoryInventory([
            InventoryItem(id="limes", name="Limes", quantity=12, unit="pcs", min_quantity=10),
        ])
        recipe = [RecipeItem(inventory_item_id="limes", quantity=1)]

        with caplog.at_level(logging.WARNING):
            inventory.consume(recipe, 2)
        assert "Low Stock Alert: Limes" in caplog.text

        caplog.clear()
        with caplog.at_level(logging.WARNING):
            inventory.consume(recipe, 1)
        assert "Low Stock Alert" not in caplog.text


class TestControllerReconciliation:

    def test_serving_consumes_recipe_stock(self, controller, inventory):
        order = controller.place_order(make_order(PAD_THAI, THAI_TEA))
        controller.set_station_status(order.id, Station.BAR, OrderStatus.SERVED)
        assert inventory.get("tea-leaves").quantity == pytest.approx(1.9)
        assert inventory.get("noodles").quantity == pytest.approx(10)

    def test_remove_served_item_round_trips_stock(self, controller, inventory):
        order = controller.place_order(make_order(PAD_THAI, THAI_TEA))
        controller.set_item_status(order.id, 0, OrderStatus.SERVED)
        controller.remove_item(order.id, 0)
        assert inventory.get("noodles").quantity == pytest.approx(10)
        assert [log.reason for log in inventory.get("noodles").logs] == [
            "Restore Order #0001: Pad Thai",
            "Order #0001: Pad Thai",
        ]
