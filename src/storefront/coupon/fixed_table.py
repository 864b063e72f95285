"""Fixed coupon table: a small in-process set of known codes."""

from storefront.coupon.port import CouponSource, CouponTerms
from storefront.shared.money import CouponType

DEFAULT_COUPONS = {
    "SAVE10": (10.0, CouponType.PERCENTAGE),
    "SAVE5": (5.0, CouponType.FIXED),
}


class FixedCouponTable(CouponSource):
    """Coupon source backed by a dict of ``code -> (discount, type)``.

    Codes match exactly (case sensitive), the same way the storefront has
    always compared them.
    """

    def __init__(self, coupons=None):
        self._coupons = dict(DEFAULT_COUPONS if coupons is None else coupons)

    def register(self, code: str, discount: float, coupon_type: CouponType) -> None:
        self._coupons[code] = (discount, CouponType(coupon_type))

    def resolve(self, code: str) -> CouponTerms | None:
        entry = self._coupons.get(code)
        if entry is None:
            return None
        discount, coupon_type = entry
        return CouponTerms(code=code, discount=discount, coupon_type=coupon_type)
