"""Domain events for the Order aggregate.

Every status-changing event carries both ``previous_status`` and ``status``
so read models can move counters without reloading the order.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a new pending order."""

    __version__ = 1

    order_number = String(required=True)
    customer_id = Identifier(required=True)
    status = String(required=True)
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    shipping_cost = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(required=True)
    currency = String(default="USD")
    payment_method = String()
    placed_at = DateTime(required=True)
    placed_on = String(required=True)  # YYYY-MM-DD, UTC


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An admin moved the order to a new status."""

    __version__ = 1

    order_number = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    note = String()
    updated_by = String()
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_number = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    reason = String()
    cancelled_by = String()
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class TrackingAdded:
    """A shipment tracking number was attached; the order is now shipped."""

    __version__ = 1

    order_number = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    tracking_number = String(required=True)
    carrier = String()
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_number = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderRefunded:
    __version__ = 1

    order_number = String(required=True)
    previous_status = String(required=True)
    status = String(required=True)
    amount = Float(required=True)
    reason = String()
    refunded_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentRecorded:
    """Payment metadata changed. Not a status change; no history entry."""

    __version__ = 1

    order_number = String(required=True)
    payment_status = String(required=True)
    transaction_id = String()
    recorded_at = DateTime(required=True)
