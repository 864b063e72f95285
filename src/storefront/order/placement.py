"""Checkout: turn the user's cart into a pending order.

Everything is validated before anything is written. The cart must have items,
every product must still exist, and live stock must cover the quantity asked
for each product (summed across lines of the same product). Only then is the
order numbered and snapshotted, stock taken, and the cart cleared, all in the
handler's unit of work.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, PaymentMethod
from storefront.cart.lookup import get_cart
from storefront.domain import storefront
from storefront.order.numbering import next_order_number
from storefront.order.order import Order, OrderSource
from storefront.product.stock import check_stock, take_stock
from storefront.shared.address import Address
from storefront.shared.clock import utcnow
from storefront.shared.errors import EmptyCart

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    shipping_address = Text()  # JSON: address dict; defaults to the cart's
    billing_address = Text()  # JSON: address dict; defaults to shipping
    payment_method = String(choices=PaymentMethod)  # Defaults to the cart's
    notes = String(max_length=500)
    is_gift = Boolean(default=False)
    gift_message = String(max_length=500)
    source = String(choices=OrderSource, default=OrderSource.WEB.value)
    ip_address = String(max_length=64)
    user_agent = String(max_length=500)


def _address(payload, fallback=None):
    if not payload:
        return fallback
    data = json.loads(payload) if isinstance(payload, str) else payload
    return Address(**data)


def _snapshot_items(cart, products):
    return [
        {
            "product_id": str(line.product_id),
            "name": products[str(line.product_id)].name,
            "quantity": line.quantity,
            "unit_price": line.unit_price,
            "variant_name": line.variant.name if line.variant else None,
            "variant_value": line.variant.value if line.variant else None,
            "image": products[str(line.product_id)].image_url,
        }
        for line in cart.items
    ]


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = get_cart(user_id=command.user_id)
        if not cart.items:
            raise EmptyCart(cart.id)

        shipping_address = _address(command.shipping_address, fallback=cart.shipping_address)
        if shipping_address is None:
            raise ValidationError({"shipping_address": ["A shipping address is required"]})

        lines = [(line.product_id, line.quantity) for line in cart.items]
        products = check_stock(lines)

        placed_at = utcnow()
        totals = cart.totals
        order = Order.place(
            order_number=next_order_number(placed_at),
            customer_id=command.user_id,
            items=_snapshot_items(cart, products),
            totals=totals,
            shipping_address=shipping_address,
            billing_address=_address(command.billing_address),
            shipping_method=cart.shipping_method,
            payment_method=command.payment_method or cart.payment_method,
            placed_at=placed_at,
            coupon=(
                {"code": cart.coupon.code, "discount": cart.coupon.discount, "coupon_type": cart.coupon.coupon_type}
                if cart.coupon
                else None
            ),
            notes=command.notes or cart.notes,
            is_gift=command.is_gift,
            gift_message=command.gift_message,
            source=command.source,
            ip_address=command.ip_address,
            user_agent=command.user_agent,
        )
        current_domain.repository_for(Order).add(order)

        take_stock(lines, products, reason=f"order {order.order_number}")

        cart.clear()
        current_domain.repository_for(Cart).add(cart)

        logger.info(
            "Order placed",
            order_number=order.order_number,
            customer_id=str(command.user_id),
            item_count=totals.item_count,
            total=totals.total,
        )
        return order.order_number
