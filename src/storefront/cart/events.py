"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or an existing line's quantity grew."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    unit_price = Float(required=True)
    variant_name = String()
    variant_value = String()


@storefront.event(part_of="Cart")
class CartItemQuantityUpdated:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartCleared:
    """All items and the coupon were removed, either by the shopper or at checkout."""

    __version__ = 1

    cart_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartCouponApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    code = String(required=True)
    discount = Float(required=True)
    coupon_type = String(required=True)


@storefront.event(part_of="Cart")
class CartCouponRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    code = String()


@storefront.event(part_of="Cart")
class CheckoutDetailsUpdated:
    """A cart-level checkout field (address, shipping method, payment method, notes) changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    detail = String(required=True)


@storefront.event(part_of="Cart")
class CartsMerged:
    """A guest cart's lines were folded into a registered user's cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    guest_token = String(required=True)
    items_merged_count = Integer(required=True)
