"""Checkout details kept on the cart: shipping address, shipping method,
payment method and notes. Each is set independently of the others.
"""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import NOTES_MAX_LENGTH, Cart, PaymentMethod
from storefront.cart.lookup import get_cart
from storefront.domain import storefront


def _load(payload):
    return json.loads(payload) if isinstance(payload, str) else payload


@storefront.command(part_of="Cart")
class SetShippingAddress:
    user_id = Identifier()
    guest_token = String(max_length=255)
    address = Text(required=True)  # JSON: address dict


@storefront.command(part_of="Cart")
class SetShippingMethod:
    user_id = Identifier()
    guest_token = String(max_length=255)
    shipping_method = Text(required=True)  # JSON: {name, price, estimated_days}


@storefront.command(part_of="Cart")
class SetPaymentMethod:
    user_id = Identifier()
    guest_token = String(max_length=255)
    payment_method = String(required=True, choices=PaymentMethod)


@storefront.command(part_of="Cart")
class SetCartNotes:
    user_id = Identifier()
    guest_token = String(max_length=255)
    notes = String(max_length=NOTES_MAX_LENGTH)


@storefront.command_handler(part_of=Cart)
class CheckoutDetailsHandler:
    @handle(SetShippingAddress)
    def set_shipping_address(self, command):
        repo = current_domain.repository_for(Cart)
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        cart.set_shipping_address(_load(command.address))
        repo.add(cart)

    @handle(SetShippingMethod)
    def set_shipping_method(self, command):
        repo = current_domain.repository_for(Cart)
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        cart.set_shipping_method(_load(command.shipping_method))
        repo.add(cart)

    @handle(SetPaymentMethod)
    def set_payment_method(self, command):
        repo = current_domain.repository_for(Cart)
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        cart.set_payment_method(command.payment_method)
        repo.add(cart)

    @handle(SetCartNotes)
    def set_notes(self, command):
        repo = current_domain.repository_for(Cart)
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        cart.set_notes(command.notes)
        repo.add(cart)
