"""Integration tests for order read models: OrderSummary and DailyOrderStats."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from storefront.cart.items import AddToCart
from storefront.order.cancellation import CancelOrder, ProcessRefund
from storefront.order.fulfillment import AddTracking, MarkOrderDelivered
from storefront.order.payment import RecordPayment
from storefront.order.placement import PlaceOrder
from storefront.projections.daily_order_stats import DailyOrderStats, period_stats
from storefront.projections.order_summary import (
    OrderSummary,
    count_by_status,
    customer_stats,
    list_orders,
    recent_orders,
)


def _process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def place(make_product, shipping_address):
    def _place(user_id="user-001", price=10.0, quantity=1):
        product_id = make_product(price=price, stock=50)
        _process(AddToCart(user_id=user_id, product_id=product_id, quantity=quantity))
        return _process(PlaceOrder(user_id=user_id, shipping_address=json.dumps(shipping_address)))

    return _place


def _summary(order_number):
    return current_domain.repository_for(OrderSummary).get(order_number)


def _today():
    return datetime.now(UTC).date().isoformat()


class TestOrderSummaryProjector:
    def test_placed_order_appears(self, place):
        order_number = place(price=12.0, quantity=2)

        summary = _summary(order_number)
        assert summary.customer_id == "user-001"
        assert summary.status == "pending"
        assert summary.item_count == 2
        assert summary.total == pytest.approx(24.0)
        assert summary.placed_on == _today()

    def test_status_follows_lifecycle(self, place):
        order_number = place()
        _process(AddTracking(order_number=order_number, tracking_number="1Z999"))
        assert _summary(order_number).status == "shipped"
        assert _summary(order_number).tracking_number == "1Z999"

        _process(MarkOrderDelivered(order_number=order_number))
        assert _summary(order_number).status == "delivered"

        _process(ProcessRefund(order_number=order_number, amount=10.0))
        assert _summary(order_number).status == "refunded"

    def test_cancellation(self, place):
        order_number = place()
        _process(CancelOrder(order_number=order_number, user_id="user-001"))
        assert _summary(order_number).status == "cancelled"

    def test_payment_status(self, place):
        order_number = place()
        _process(RecordPayment(order_number=order_number, payment_status="failed"))
        summary = _summary(order_number)
        assert summary.payment_status == "failed"
        assert summary.status == "pending"


class TestOrderQueries:
    def test_list_orders_filters_by_customer_and_status(self, place):
        mine = place()
        place(user_id="user-002")
        _process(CancelOrder(order_number=mine, user_id="user-001"))

        assert list_orders(customer_id="user-001")["pagination"]["total_orders"] == 1
        assert list_orders(status="cancelled")["orders"][0].order_number == mine
        assert list_orders(status="pending")["orders"][0].customer_id == "user-002"

    def test_list_orders_date_bounds(self, place):
        place()
        assert list_orders(since=_today(), until=_today())["pagination"]["total_orders"] == 1
        assert list_orders(until="2000-01-01")["pagination"]["total_orders"] == 0

    def test_newest_first(self, place):
        first = place()
        second = place()
        assert [o.order_number for o in recent_orders("user-001")] == [second, first]

    def test_recent_orders_limit(self, place):
        for _ in range(6):
            place()
        assert len(recent_orders("user-001")) == 5

    def test_customer_stats(self, place):
        place(price=10.0)
        place(price=30.0)
        assert customer_stats("user-001") == {
            "total_orders": 2,
            "total_spent": pytest.approx(40.0),
            "average_order_value": pytest.approx(20.0),
        }

    def test_customer_stats_without_orders(self):
        assert customer_stats("nobody") == {"total_orders": 0, "total_spent": 0, "average_order_value": 0.0}

    def test_count_by_status(self, place):
        place()
        cancelled = place()
        _process(CancelOrder(order_number=cancelled))

        counts = count_by_status()
        assert counts["pending"] == 1
        assert counts["cancelled"] == 1
        assert counts["returned"] == 0


class TestDailyOrderStats:
    def test_counts_and_revenue(self, place):
        first = place(price=10.0)
        second = place(price=20.0, quantity=2)
        _process(CancelOrder(order_number=first))
        _process(MarkOrderDelivered(order_number=second))
        _process(ProcessRefund(order_number=second, amount=15.0))

        record = current_domain.repository_for(DailyOrderStats).get(_today())
        assert record.orders_placed == 2
        assert record.total_revenue == pytest.approx(50.0)
        assert record.orders_cancelled == 1
        assert record.orders_delivered == 1
        assert record.orders_refunded == 1
        assert record.total_refunds == pytest.approx(15.0)

    def test_period_stats(self, place):
        place(price=10.0)
        place(price=30.0)

        stats = period_stats(days=30)
        overview = stats["overview"]
        assert overview["total_orders"] == 2
        assert overview["total_revenue"] == pytest.approx(40.0)
        assert overview["average_order_value"] == pytest.approx(20.0)
        assert overview["by_status"]["pending"] == 2
        assert stats["daily"] == [{"date": _today(), "orders": 2, "revenue": pytest.approx(40.0)}]

    def test_period_excludes_older_days(self, place):
        place()
        stats = period_stats(days=7, as_of=datetime.now(UTC) + timedelta(days=30))
        assert stats["overview"]["total_orders"] == 0
        assert stats["daily"] == []

    def test_empty_period(self):
        overview = period_stats()["overview"]
        assert overview["total_orders"] == 0
        assert overview["average_order_value"] == 0.0
