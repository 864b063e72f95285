"""Cart pricing: the monetary summary derived from a cart's current state.

Nothing here is stored. Every read recomputes from the lines, the coupon and
the shipping selection, so the figures cannot drift from the cart itself.
"""

from dataclasses import dataclass

from storefront.shared.money import coupon_discount


@dataclass(frozen=True)
class CartTotals:
    subtotal: float = 0.0
    shipping_cost: float = 0.0
    discount_amount: float = 0.0
    total: float = 0.0
    item_count: int = 0


def price_cart(items, coupon=None, shipping_method=None) -> CartTotals:
    """Price a cart.

    Args:
        items: Lines exposing ``unit_price`` and ``quantity``.
        coupon: Optional object exposing ``discount`` and ``coupon_type``.
        shipping_method: Optional object exposing ``price``.
    """
    subtotal = sum(item.unit_price * item.quantity for item in items)
    item_count = sum(item.quantity for item in items)
    shipping_cost = (shipping_method.price or 0.0) if shipping_method else 0.0
    discount_amount = coupon_discount(subtotal, coupon.discount, coupon.coupon_type) if coupon else 0.0

    return CartTotals(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        discount_amount=discount_amount,
        total=subtotal + shipping_cost - discount_amount,
        item_count=item_count,
    )
