"""Coupon source abstraction: pluggable coupon lookup."""

import os

_coupon_source = None


def get_coupon_source():
    """Return the configured coupon source (singleton).

    Uses the fixed table by default. Select another adapter with the
    COUPON_SOURCE environment variable.
    """
    global _coupon_source
    if _coupon_source is None:
        adapter = os.environ.get("COUPON_SOURCE", "fixed")
        if adapter == "fixed":
            from storefront.coupon.fixed_table import FixedCouponTable

            _coupon_source = FixedCouponTable()
        else:
            raise ValueError(f"Unknown coupon source: {adapter}")
    return _coupon_source


def set_coupon_source(source):
    """Install a specific coupon source instance (tests, custom wiring)."""
    global _coupon_source
    _coupon_source = source


def reset_coupon_source():
    """Drop the cached coupon source so the next lookup rebuilds it."""
    global _coupon_source
    _coupon_source = None
