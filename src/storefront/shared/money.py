"""Money helpers shared by cart pricing and the product catalogue."""

from enum import Enum

DEFAULT_CURRENCY = "USD"


class CouponType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def apply_percent_off(amount, percent):
    """Reduce ``amount`` by ``percent`` (0-100). A missing or zero percent leaves it unchanged."""
    if not percent or percent <= 0:
        return amount
    return amount * (1 - percent / 100)


def coupon_discount(subtotal, discount, coupon_type):
    """Discount a coupon grants against ``subtotal``.

    Percentage coupons take ``discount`` percent of the subtotal; fixed coupons
    take ``discount`` but never more than the subtotal itself.
    """
    if CouponType(coupon_type) == CouponType.PERCENTAGE:
        return subtotal * discount / 100
    return min(discount, subtotal)


def format_amount(amount):
    """Render an amount the way order notes quote it: no trailing zeros beyond cents."""
    return f"{amount:.2f}".rstrip("0").rstrip(".")
