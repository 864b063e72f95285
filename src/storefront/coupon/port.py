"""Coupon source port: where coupon codes are looked up.

Cart code asks the port to resolve a code and never knows whether the answer
came from a fixed table, a database or a promotions service.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storefront.shared.money import CouponType


@dataclass(frozen=True)
class CouponTerms:
    """What a valid coupon is worth: ``discount`` percent or ``discount`` currency units."""

    code: str
    discount: float
    coupon_type: CouponType


class CouponSource(ABC):
    @abstractmethod
    def resolve(self, code: str) -> CouponTerms | None:
        """Return the terms for ``code``, or None when the code is unknown."""
        ...
