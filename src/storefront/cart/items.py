"""Cart item management: commands and handler.

Adding an item is where the catalogue is consulted: the product must exist,
be active and hold enough stock, and the line's unit price is captured from
the chosen variant or the product's discounted price at that moment.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, SelectedVariant
from storefront.cart.lookup import get_cart
from storefront.cart.management import open_cart
from storefront.domain import storefront
from storefront.product.product import Product
from storefront.shared.errors import InsufficientStock, ProductUnavailable


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier()
    guest_token = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    variant_name = String(max_length=50)
    variant_value = String(max_length=100)


@storefront.command(part_of="Cart")
class UpdateCartItemQuantity:
    user_id = Identifier()
    guest_token = String(max_length=255)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)  # Zero or less removes the line


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier()
    guest_token = String(max_length=255)
    item_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    user_id = Identifier()
    guest_token = String(max_length=255)


def _price_line(product, variant_name, variant_value):
    """Unit price and selected variant for a new line."""
    if variant_name or variant_value:
        variant = product.find_variant(variant_name, variant_value)
        if variant is None:
            raise ValidationError({"variant": [f"Product {product.id} has no variant {variant_name}={variant_value}"]})
        return variant.price, SelectedVariant(name=variant.name, value=variant.value, price=variant.price)
    return product.discounted_price, None


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        if not product.is_active:
            raise ProductUnavailable(product.id, product.status)
        if command.quantity > product.stock:
            raise InsufficientStock(
                product.id,
                requested=command.quantity,
                available=product.stock,
                product_name=product.name,
            )

        unit_price, variant = _price_line(product, command.variant_name, command.variant_value)

        cart = open_cart(user_id=command.user_id, guest_token=command.guest_token)
        line = cart.add_item(
            product_id=product.id,
            quantity=command.quantity,
            unit_price=unit_price,
            variant=variant,
        )
        current_domain.repository_for(Cart).add(cart)
        return str(line.id)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        cart.update_item_quantity(item_id=command.item_id, quantity=command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        cart.remove_item(item_id=command.item_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = get_cart(user_id=command.user_id, guest_token=command.guest_token)
        cart.clear()
        repo.add(cart)
