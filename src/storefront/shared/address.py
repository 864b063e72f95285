"""Postal address value object shared by carts and orders."""

from protean.fields import String

from storefront.domain import storefront


@storefront.value_object
class Address:
    """A delivery or billing address.

    Carts hold a mutable reference to one; orders copy it at checkout so later
    edits to the cart (or a new cart) never change where an order was sent.
    """

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    phone = String(max_length=30)
    street = String(required=True, max_length=255)
    apartment = String(max_length=100)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100, default="United States")
