"""Daily order stats projection: the admin dashboard's per-day figures.

Maintains daily counts of orders placed, cancelled, delivered and refunded,
with revenue and refund totals. Keyed by UTC date (YYYY-MM-DD) of the event.
"""

from datetime import timedelta

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderRefunded,
)
from storefront.order.order import Order
from storefront.projections.order_summary import count_by_status
from storefront.shared.clock import as_utc, utcnow


@storefront.projection
class DailyOrderStats:
    date = String(identifier=True, required=True, max_length=10)  # YYYY-MM-DD
    orders_placed = Integer(default=0)
    orders_cancelled = Integer(default=0)
    orders_delivered = Integer(default=0)
    orders_refunded = Integer(default=0)
    total_revenue = Float(default=0.0)
    total_refunds = Float(default=0.0)


def _get_or_create(date_key):
    repo = current_domain.repository_for(DailyOrderStats)
    try:
        return repo.get(date_key)
    except ObjectNotFoundError:
        return DailyOrderStats(
            date=date_key,
            orders_placed=0,
            orders_cancelled=0,
            orders_delivered=0,
            orders_refunded=0,
            total_revenue=0.0,
            total_refunds=0.0,
        )


def _day(moment):
    return as_utc(moment).date().isoformat()


@storefront.projector(projector_for=DailyOrderStats, aggregates=[Order])
class DailyOrderStatsProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        record = _get_or_create(event.placed_on)
        record.orders_placed = (record.orders_placed or 0) + 1
        record.total_revenue = (record.total_revenue or 0.0) + (event.total or 0.0)
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        record = _get_or_create(_day(event.cancelled_at))
        record.orders_cancelled = (record.orders_cancelled or 0) + 1
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        record = _get_or_create(_day(event.delivered_at))
        record.orders_delivered = (record.orders_delivered or 0) + 1
        current_domain.repository_for(DailyOrderStats).add(record)

    @on(OrderRefunded)
    def on_order_refunded(self, event):
        record = _get_or_create(_day(event.refunded_at))
        record.orders_refunded = (record.orders_refunded or 0) + 1
        record.total_refunds = (record.total_refunds or 0.0) + (event.amount or 0.0)
        current_domain.repository_for(DailyOrderStats).add(record)


def period_stats(days=30, as_of=None):
    """Overview and daily series for the last ``days`` days, today included."""
    today = as_utc(as_of or utcnow()).date()
    since = (today - timedelta(days=days)).isoformat()

    daily = sorted(
        current_domain.repository_for(DailyOrderStats)
        ._dao.query.filter(date__gte=since, date__lte=today.isoformat())
        .limit(days + 1)
        .all()
        .items,
        key=lambda record: record.date,
    )
    total_orders = sum(record.orders_placed or 0 for record in daily)
    total_revenue = sum(record.total_revenue or 0.0 for record in daily)

    return {
        "overview": {
            "total_orders": total_orders,
            "total_revenue": total_revenue,
            "average_order_value": total_revenue / total_orders if total_orders else 0.0,
            "total_refunds": sum(record.total_refunds or 0.0 for record in daily),
            "by_status": count_by_status(since=since),
        },
        "daily": [
            {"date": record.date, "orders": record.orders_placed or 0, "revenue": record.total_revenue or 0.0}
            for record in daily
        ],
    }
