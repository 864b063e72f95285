"""Application tests for applying and removing coupons on a cart."""

import pytest
from protean import current_domain
from storefront.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from storefront.cart.items import AddToCart
from storefront.cart.lookup import get_cart
from storefront.cart.management import OpenCart
from storefront.coupon import set_coupon_source
from storefront.coupon.fixed_table import FixedCouponTable
from storefront.shared.errors import EmptyCart
from storefront.shared.money import CouponType


@pytest.fixture()
def cart_with_items(make_product):
    product_id = make_product(name="Olive Oil", price=20.0)
    current_domain.process(AddToCart(user_id="user-001", product_id=product_id, quantity=2), asynchronous=False)


def _apply(code):
    return current_domain.process(ApplyCouponToCart(user_id="user-001", code=code), asynchronous=False)


class TestApplyCoupon:
    def test_percentage_coupon(self, cart_with_items):
        assert _apply("SAVE10") is True

        cart = get_cart(user_id="user-001")
        assert cart.coupon.code == "SAVE10"
        assert cart.discount_amount == pytest.approx(4.0)
        assert cart.total == pytest.approx(36.0)

    def test_fixed_coupon(self, cart_with_items):
        _apply("SAVE5")
        assert get_cart(user_id="user-001").discount_amount == pytest.approx(5.0)

    def test_surrounding_whitespace_is_ignored(self, cart_with_items):
        assert _apply("  SAVE10 ") is True

    def test_unknown_code_is_ignored(self, cart_with_items):
        assert _apply("FREEFOOD") is False
        cart = get_cart(user_id="user-001")
        assert cart.coupon is None
        assert cart.discount_amount == 0.0

    def test_unknown_code_keeps_existing_coupon(self, cart_with_items):
        _apply("SAVE10")
        _apply("FREEFOOD")
        assert get_cart(user_id="user-001").coupon.code == "SAVE10"

    def test_empty_cart_is_refused(self):
        current_domain.process(OpenCart(user_id="user-001"), asynchronous=False)
        with pytest.raises(EmptyCart):
            _apply("SAVE10")

    def test_custom_coupon_source(self, cart_with_items):
        set_coupon_source(FixedCouponTable({"HARVEST": (25.0, CouponType.PERCENTAGE)}))

        assert _apply("SAVE10") is False
        assert _apply("HARVEST") is True
        assert get_cart(user_id="user-001").discount_amount == pytest.approx(10.0)


class TestRemoveCoupon:
    def test_remove_coupon(self, cart_with_items):
        _apply("SAVE10")
        current_domain.process(RemoveCouponFromCart(user_id="user-001"), asynchronous=False)

        cart = get_cart(user_id="user-001")
        assert cart.coupon is None
        assert cart.total == pytest.approx(40.0)
