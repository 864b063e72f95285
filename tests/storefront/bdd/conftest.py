"""Shared BDD fixtures and step definitions for the storefront."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.cart.details import SetShippingAddress
from storefront.cart.items import AddToCart
from storefront.cart.lookup import get_cart
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.product.product import Product


@pytest.fixture()
def ctx():
    """Scenario state: product ids by name, the shopper, the last order and any captured error."""
    return {"products": {}, "user_id": None, "order_number": None, "error": None}


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _order(ctx):
    return current_domain.repository_for(Order).get(ctx["order_number"])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(ctx, make_product, name, price, stock):
    ctx["products"][name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the shopper "{user_id}" has {quantity:d} of "{name}" in their cart'))
def _(ctx, user_id, quantity, name):
    ctx["user_id"] = user_id
    _process(AddToCart(user_id=user_id, product_id=ctx["products"][name], quantity=quantity))


@given("the shopper has a shipping address")
def _(ctx, shipping_address):
    _process(SetShippingAddress(user_id=ctx["user_id"], address=json.dumps(shipping_address)))


@given("the shopper placed an order")
def _(ctx):
    ctx["order_number"] = _process(PlaceOrder(user_id=ctx["user_id"]))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the shopper places an order")
def _(ctx):
    try:
        ctx["order_number"] = _process(PlaceOrder(user_id=ctx["user_id"]))
    except ValidationError as exc:
        ctx["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(ctx, status):
    assert _order(ctx).status == status


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(ctx, name, stock):
    assert current_domain.repository_for(Product).get(ctx["products"][name]).stock == stock


@then("the shopper's cart is empty")
def _(ctx):
    assert len(get_cart(user_id=ctx["user_id"]).items) == 0


@then(parsers.cfparse("the shopper's cart still has {count:d} items"))
def _(ctx, count):
    assert get_cart(user_id=ctx["user_id"]).item_count == count
