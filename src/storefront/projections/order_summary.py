"""Order summary: one row per order for listings, recent orders and
per-customer spending figures."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
    PaymentRecorded,
    TrackingAdded,
)
from storefront.order.order import ORDER_NUMBER_MAX_LENGTH, Order, OrderStatus

PAGE_SIZE = 100


@storefront.projection
class OrderSummary:
    order_number = String(identifier=True, required=True, max_length=ORDER_NUMBER_MAX_LENGTH)
    customer_id = Identifier(required=True)
    status = String(required=True)
    item_count = Integer(default=0)
    total = Float(default=0.0)
    currency = String(default="USD")
    payment_method = String()
    payment_status = String(default="pending")
    tracking_number = String()
    placed_at = DateTime()
    placed_on = String(max_length=10)
    updated_at = DateTime()


@storefront.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_number=event.order_number,
                customer_id=event.customer_id,
                status=event.status,
                item_count=event.item_count,
                total=event.total,
                currency=event.currency or "USD",
                payment_method=event.payment_method,
                placed_at=event.placed_at,
                placed_on=event.placed_on,
                updated_at=event.placed_at,
            )
        )

    def _update_status(self, order_number, status, updated_at, **changes):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(order_number)
        summary.status = status
        summary.updated_at = updated_at
        for name, value in changes.items():
            setattr(summary, name, value)
        repo.add(summary)

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        self._update_status(event.order_number, event.status, event.changed_at)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update_status(event.order_number, event.status, event.cancelled_at)

    @on(TrackingAdded)
    def on_tracking_added(self, event):
        self._update_status(
            event.order_number,
            event.status,
            event.shipped_at,
            tracking_number=event.tracking_number,
        )

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        self._update_status(event.order_number, event.status, event.delivered_at)

    @on(OrderRefunded)
    def on_order_refunded(self, event):
        self._update_status(event.order_number, event.status, event.refunded_at)

    @on(PaymentRecorded)
    def on_payment_recorded(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_number)
        summary.payment_status = event.payment_status
        summary.updated_at = event.recorded_at
        repo.add(summary)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
def _criteria(customer_id=None, status=None, since=None, until=None):
    criteria = {}
    if customer_id:
        criteria["customer_id"] = str(customer_id)
    if status:
        criteria["status"] = status
    if since:
        criteria["placed_on__gte"] = since
    if until:
        criteria["placed_on__lte"] = until
    return criteria


def list_orders(customer_id=None, status=None, since=None, until=None, page=1, limit=10):
    """One page of summaries, newest first, plus pagination figures.

    ``since``/``until`` are inclusive YYYY-MM-DD bounds on the placement day.
    """
    page = max(page, 1)
    offset = (page - 1) * limit
    results = (
        current_domain.repository_for(OrderSummary)
        ._dao.query.filter(**_criteria(customer_id, status, since, until))
        .order_by("-placed_at")
        .offset(offset)
        .limit(limit)
        .all()
    )
    total = results.total
    return {
        "orders": results.items,
        "pagination": {
            "current_page": page,
            "total_pages": -(-total // limit) if limit else 0,
            "total_orders": total,
            "has_next_page": offset + len(results.items) < total,
            "has_prev_page": page > 1,
        },
    }


def recent_orders(customer_id, limit=5):
    return list_orders(customer_id=customer_id, limit=limit)["orders"]


def _all_summaries(**criteria):
    repo = current_domain.repository_for(OrderSummary)
    offset = 0
    while True:
        batch = repo._dao.query.filter(**criteria).offset(offset).limit(PAGE_SIZE).all()
        yield from batch.items
        offset += len(batch.items)
        if not batch.items or offset >= batch.total:
            return


def customer_stats(customer_id):
    """Order count, total spent and average order value across all of a customer's orders."""
    totals = [summary.total or 0.0 for summary in _all_summaries(**_criteria(customer_id=customer_id))]
    total_spent = sum(totals)
    return {
        "total_orders": len(totals),
        "total_spent": total_spent,
        "average_order_value": total_spent / len(totals) if totals else 0.0,
    }


def count_by_status(since=None):
    """Orders placed on or after ``since`` (YYYY-MM-DD), counted by their current status."""
    repo = current_domain.repository_for(OrderSummary)
    return {
        status: repo._dao.query.filter(**_criteria(status=status, since=since)).all().total
        for status in (s.value for s in OrderStatus)
    }
