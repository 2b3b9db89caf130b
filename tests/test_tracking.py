"""Tests for item-level status transitions."""

import pytest

from exceptions import InvalidTransition, NotFound
from schemas import OrderStatus
from tracking import ItemStatusTracker

from conftest import PAD_THAI, THAI_TEA, make_order


@pytest.fixture
def order():
    return make_order(PAD_THAI, THAI_TEA)


class TestAllowedTransitions:

    @pytest.mark.parametrize("current,target", [
        (OrderStatus.PENDING, OrderStatus.COOKING),
        (OrderStatus.PENDING, OrderStatus.SERVED),
        (OrderStatus.COOKING, OrderStatus.SERVED),
    ])
    def test_forward_moves(self, order, current, target):
        order.items[0].status = current
        assert ItemStatusTracker().set_item_status(order, 0, target) is order
        assert order.items[0].status == target

    def test_same_status_is_noop(self, order):
        recomputed = []
        tracker = ItemStatusTracker(recompute=recomputed.append)
        assert tracker.set_item_status(order, 0, OrderStatus.PENDING) is order
        assert order.items[0].status == OrderStatus.PENDING
        assert recomputed == []

    def test_accepts_status_value_strings(self, order):
        ItemStatusTracker().set_item_status(order, 1, "Cooking")
        assert order.items[1].status == OrderStatus.COOKING


class TestRejectedTransitions:

    @pytest.mark.parametrize("target", [OrderStatus.PENDING, OrderStatus.COOKING])
    def test_served_never_regresses(self, order, target):
        order.items[0].status = OrderStatus.SERVED
        with pytest.raises(InvalidTransition):
            ItemStatusTracker().set_item_status(order, 0, target)
        assert order.items[0].status == OrderStatus.SERVED

    def test_cooking_cannot_go_back_to_pending(self, order):
        order.items[0].status = OrderStatus.COOKING
        with pytest.raises(InvalidTransition):
            ItemStatusTracker().set_item_status(order, 0, OrderStatus.PENDING)

    @pytest.mark.parametrize("target", [
        OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.NONE, "Burnt",
    ])
    def test_order_level_statuses_rejected_for_items(self, order, target):
        with pytest.raises(InvalidTransition):
            ItemStatusTracker().set_item_status(order, 0, target)
        assert order.items[0].status == OrderStatus.PENDING

    @pytest.mark.parametrize("index", [-1, 2, 99])
    def test_unknown_index(self, order, index):
        with pytest.raises(NotFound) as exc:
            ItemStatusTracker().set_item_status(order, index, OrderStatus.COOKING)
        assert exc.value.item_index == index


class TestSideEffects:

    def test_recompute_runs_after_every_transition(self, order):
        seen = []
        tracker = ItemStatusTracker(recompute=lambda o: seen.append(o.items[0].status))
        tracker.set_item_status(order, 0, OrderStatus.COOKING)
        tracker.set_item_status(order, 0, OrderStatus.SERVED)
        assert seen == [OrderStatus.COOKING, OrderStatus.SERVED]

    def test_on_served_only_fires_on_entering_served(self, order):
        served = []
        tracker = ItemStatusTracker()
        on_served = lambda index, item: served.append(index)

        tracker.set_item_status(order, 0, OrderStatus.COOKING, on_served=on_served)
        assert served == []
        tracker.set_item_status(order, 0, OrderStatus.SERVED, on_served=on_served)
        tracker.set_item_status(order, 0, OrderStatus.SERVED, on_served=on_served)
        assert served == [0]
