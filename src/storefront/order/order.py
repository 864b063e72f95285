"""Order aggregate: the immutable snapshot of a checked-out cart plus its
status lifecycle.

Item lines, prices and addresses are copied from the cart at checkout and
never change afterwards. What does change is the status, and every status
change appends one entry to an append-only history.

Status flow:
    pending -> confirmed -> processing -> shipped -> delivered
    cancelled, refunded, returned

The machine is permissive: ``update_status`` accepts any target from any
state. Only cancellation is guarded (pending, confirmed or processing).
"""

from datetime import timedelta
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

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
from storefront.shared.address import Address
from storefront.shared.clock import as_utc, utcnow
from storefront.shared.errors import InvalidTransition
from storefront.shared.money import DEFAULT_CURRENCY, format_amount
from storefront.shared.shipping import ShippingMethod

RETURN_WINDOW = timedelta(days=30)
# YYMMDD plus a daily sequence that is zero padded to four digits and widens past 9999
ORDER_NUMBER_MAX_LENGTH = 16


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    RETURNED = "returned"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class OrderSource(Enum):
    WEB = "web"
    MOBILE = "mobile"
    ADMIN = "admin"


_CANCELLABLE_STATES = (
    OrderStatus.PENDING.value,
    OrderStatus.CONFIRMED.value,
    OrderStatus.PROCESSING.value,
)

DEFAULT_CANCEL_NOTE = "Order cancelled by customer"
DELIVERED_NOTE = "Order delivered successfully"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderCoupon:
    """The coupon that priced the order, as it stood at checkout."""

    code = String(required=True, max_length=50)
    discount = Float(required=True)
    coupon_type = String(required=True, max_length=20)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line, frozen at checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    variant_name = String(max_length=50)
    variant_value = String(max_length=100)
    image = String(max_length=500)


@storefront.entity(part_of="Order")
class StatusChange:
    """One entry in the order's status history. Entries are never edited or removed."""

    sequence = Integer(required=True, min_value=1)
    status = String(required=True, choices=OrderStatus)
    changed_at = DateTime(required=True)
    note = String(max_length=500)
    updated_by = String(max_length=255)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(identifier=True, max_length=ORDER_NUMBER_MAX_LENGTH)
    customer_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusChange)
    items = HasMany(OrderItem)

    # Pricing snapshot
    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0)
    discount = Float(default=0.0)
    coupon = ValueObject(OrderCoupon)
    total = Float(required=True)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)

    # Delivery
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address)
    shipping_method = ValueObject(ShippingMethod)
    tracking_number = String(max_length=255)
    carrier = String(max_length=100)
    actual_delivery = DateTime()

    # Payment (metadata only, nothing is charged here)
    payment_method = String(required=True, max_length=50)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=255)

    # Request context
    notes = String(max_length=500)
    is_gift = Boolean(default=False)
    gift_message = String(max_length=500)
    source = String(choices=OrderSource, default=OrderSource.WEB.value)
    ip_address = String(max_length=64)
    user_agent = String(max_length=500)

    placed_at = DateTime()
    placed_on = String(max_length=10)  # YYYY-MM-DD, UTC
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        items,
        totals,
        shipping_address,
        payment_method,
        placed_at,
        billing_address=None,
        shipping_method=None,
        coupon=None,
        **context,
    ):
        """Create a pending order from a priced cart snapshot.

        Args:
            items: List of dicts with product_id, name, quantity, unit_price,
                   variant_name, variant_value and image.
            totals: ``CartTotals`` of the cart at checkout.
            billing_address: Defaults to the shipping address.
            coupon: Optional dict with code, discount and coupon_type.
            context: Optional notes, is_gift, gift_message, source,
                     ip_address and user_agent.
        """
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            status=OrderStatus.PENDING.value,
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            discount=totals.discount_amount,
            coupon=OrderCoupon(**coupon) if coupon else None,
            total=totals.total,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            shipping_method=shipping_method,
            payment_method=payment_method,
            placed_at=placed_at,
            placed_on=as_utc(placed_at).date().isoformat(),
            updated_at=placed_at,
            **{key: value for key, value in context.items() if value is not None},
        )
        for item in items:
            order.add_items(OrderItem(**item))
        order._record(OrderStatus.PENDING.value, changed_at=placed_at)

        order.raise_(
            OrderPlaced(
                order_number=order.order_number,
                customer_id=str(customer_id),
                status=order.status,
                item_count=sum(item.quantity for item in order.items),
                subtotal=order.subtotal,
                shipping_cost=order.shipping_cost,
                discount=order.discount,
                total=order.total,
                currency=order.currency,
                payment_method=order.payment_method,
                placed_at=placed_at,
                placed_on=order.placed_on,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def history(self):
        """Status history in the order it was written."""
        return sorted(self.status_history, key=lambda entry: entry.sequence)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    @property
    def is_delivered(self):
        return self.status == OrderStatus.DELIVERED.value

    @property
    def is_cancelled(self):
        return self.status == OrderStatus.CANCELLED.value

    @property
    def can_cancel(self):
        return self.status in _CANCELLABLE_STATES

    def can_return(self, as_of=None):
        """Delivered orders may be returned for 30 days after delivery."""
        if not self.is_delivered:
            return False
        delivered_at = as_utc(self.actual_delivery or self.updated_at)
        if delivered_at is None:
            return False
        return as_utc(as_of or utcnow()) - delivered_at <= RETURN_WINDOW

    # -------------------------------------------------------------------
    # History helper
    # -------------------------------------------------------------------
    def _record(self, status, note=None, updated_by=None, changed_at=None):
        """Set ``status`` and append the matching history entry."""
        changed_at = changed_at or utcnow()
        self.status = OrderStatus(status).value
        self.updated_at = changed_at
        self.add_status_history(
            StatusChange(
                sequence=len(self.status_history) + 1,
                status=self.status,
                changed_at=changed_at,
                note=note,
                updated_by=updated_by,
            )
        )
        return changed_at

    # -------------------------------------------------------------------
    # Lifecycle transitions
    # -------------------------------------------------------------------
    def update_status(self, new_status, note=None, updated_by=None):
        """Move to any status. No transition rules apply here."""
        try:
            target = OrderStatus(new_status).value
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from None

        previous = self.status
        changed_at = self._record(target, note=note, updated_by=updated_by)
        self.raise_(
            OrderStatusChanged(
                order_number=self.order_number,
                previous_status=previous,
                status=target,
                note=note,
                updated_by=updated_by,
                changed_at=changed_at,
            )
        )

    def cancel(self, reason=None, updated_by=None):
        """Cancel a pending, confirmed or processing order.

        Raises ``InvalidTransition`` from any other state; the order and its
        history are left untouched.
        """
        if not self.can_cancel:
            raise InvalidTransition(self.status, OrderStatus.CANCELLED.value, allowed=_CANCELLABLE_STATES)

        previous = self.status
        cancelled_at = self._record(
            OrderStatus.CANCELLED.value,
            note=reason or DEFAULT_CANCEL_NOTE,
            updated_by=updated_by,
        )
        self.raise_(
            OrderCancelled(
                order_number=self.order_number,
                previous_status=previous,
                status=self.status,
                reason=reason or DEFAULT_CANCEL_NOTE,
                cancelled_by=updated_by,
                cancelled_at=cancelled_at,
            )
        )

    def add_tracking(self, tracking_number, carrier=None):
        """Attach shipment tracking. Always moves the order to shipped."""
        previous = self.status
        self.tracking_number = tracking_number
        self.carrier = carrier
        shipped_at = self._record(OrderStatus.SHIPPED.value, note=f"Tracking number: {tracking_number}")
        self.raise_(
            TrackingAdded(
                order_number=self.order_number,
                previous_status=previous,
                status=self.status,
                tracking_number=tracking_number,
                carrier=carrier,
                shipped_at=shipped_at,
            )
        )

    def mark_delivered(self):
        previous = self.status
        delivered_at = utcnow()
        self.actual_delivery = delivered_at
        self._record(OrderStatus.DELIVERED.value, note=DELIVERED_NOTE, changed_at=delivered_at)
        self.raise_(
            OrderDelivered(
                order_number=self.order_number,
                previous_status=previous,
                status=self.status,
                delivered_at=delivered_at,
            )
        )

    def process_refund(self, amount, reason=None):
        """Mark the order refunded. ``amount`` is recorded as given, not checked against the total."""
        previous = self.status
        refunded_at = self._record(
            OrderStatus.REFUNDED.value,
            note=f"Refund processed: ${format_amount(amount)} - {reason or ''}",
        )
        self.raise_(
            OrderRefunded(
                order_number=self.order_number,
                previous_status=previous,
                status=self.status,
                amount=amount,
                reason=reason,
                refunded_at=refunded_at,
            )
        )

    # -------------------------------------------------------------------
    # Payment metadata
    # -------------------------------------------------------------------
    def record_payment(self, payment_status, transaction_id=None):
        self.payment_status = PaymentStatus(payment_status).value
        if transaction_id:
            self.transaction_id = transaction_id
        recorded_at = utcnow()
        self.updated_at = recorded_at
        self.raise_(
            PaymentRecorded(
                order_number=self.order_number,
                payment_status=self.payment_status,
                transaction_id=self.transaction_id,
                recorded_at=recorded_at,
            )
        )
